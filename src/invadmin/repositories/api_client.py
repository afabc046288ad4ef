from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from invadmin.config import ApiSettings
from invadmin.domain.errors import (
    AuthorizationError,
    NotFoundError,
    ServerMessageError,
    TransportError,
    ValidationError,
)
from invadmin.repositories.envelope import field_errors

log = logging.getLogger("invadmin.api")


class ApiClient:
    def __init__(self, settings: ApiSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if settings.token:
            self.session.headers.update({"Authorization": f"Bearer {settings.token}"})

    def url(self, path: str) -> str:
        return f"{self.settings.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
    ) -> Any:
        url = self.url(path)
        try:
            r = self.session.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                files=files,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            log.warning("api_transport_failed method=%s url=%s error=%s", method, url, e)
            raise TransportError(f"Could not reach {url}: {e}") from e

        body = self._body(r)
        if r.status_code >= 400:
            log.warning("api_error method=%s url=%s status=%s", method, url, r.status_code)
            raise self._error_for(r.status_code, body)

        log.info("api_ok method=%s url=%s status=%s", method, url, r.status_code)
        return body

    @staticmethod
    def _body(r) -> Any:
        if r.status_code == 204 or not r.content:
            return {}
        try:
            return r.json()
        except ValueError as e:
            if r.status_code >= 400:
                return {}
            raise TransportError(f"Server returned a non-JSON body (status {r.status_code}).") from e

    @staticmethod
    def _error_for(status: int, body: Any) -> Exception:
        message = body.get("message") if isinstance(body, dict) else None
        if status == 422:
            errors = field_errors(body)
            if errors:
                first_field = next(iter(errors))
                first = errors[first_field][0] if errors[first_field] else message or "Validation failed"
                return ValidationError(first, code="validation_failed", field_errors=errors)
            return ValidationError(message or "Validation failed", code="validation_failed")
        if status == 404:
            return NotFoundError(message or "Resource not found.")
        if status in (401, 403):
            return AuthorizationError(message or "Not allowed.")
        return ServerMessageError(message, status=status)

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
