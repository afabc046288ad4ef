from __future__ import annotations

from typing import Any, Optional

from invadmin.domain.models import Page
from invadmin.repositories.api_client import ApiClient
from invadmin.repositories.envelope import parse_page
from invadmin.repositories.resources import ResourceSpec

LOOKUP_LIMIT = 1000


def _form_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


class RestRepository:
    """Catalog persistence backed by the admin REST API."""

    def __init__(self, client: ApiClient):
        self.client = client

    def list_page(
        self,
        spec: ResourceSpec,
        page: int,
        limit: int,
        keyword: Optional[str] = None,
        filters: Optional[dict] = None,
    ) -> Page:
        params: dict[str, Any] = {"page": int(page), "limit": int(limit)}
        if keyword:
            params[spec.search_param] = keyword
        for name, value in (filters or {}).items():
            if value not in (None, "", "all"):
                params[name] = value
        body = self.client.get(spec.path, params=params)
        return parse_page(body, spec, page=int(page), limit=int(limit))

    def list_lookup(self, spec: ResourceSpec) -> list:
        return self.list_page(spec, page=1, limit=LOOKUP_LIMIT).items

    def create(self, spec: ResourceSpec, payload: dict, files: Optional[dict] = None) -> Any:
        if files:
            data = {k: _form_value(v) for k, v in payload.items()}
            return self.client.post(spec.path, data=data, files=files)
        return self.client.post(spec.path, json=payload)

    def update(self, spec: ResourceSpec, entity_id: int, payload: dict, files: Optional[dict] = None) -> Any:
        path = f"{spec.path}/{int(entity_id)}"
        if not files:
            return self.client.put(path, json=payload)
        data = {k: _form_value(v) for k, v in payload.items()}
        if spec.method_override:
            # multipart bodies are only parsed on POST by the backend
            data["_method"] = "PUT"
            return self.client.post(path, data=data, files=files)
        return self.client.put(path, data=data, files=files)

    def delete(self, spec: ResourceSpec, entity_id: int) -> Any:
        return self.client.delete(f"{spec.path}/{int(entity_id)}")

    def fetch_json(self, path: str, params: Optional[dict] = None) -> Any:
        return self.client.get(path, params=params)
