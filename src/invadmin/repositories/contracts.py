from __future__ import annotations

from typing import Any, Optional, Protocol

from invadmin.domain.models import Page
from invadmin.repositories.resources import ResourceSpec


class CatalogRepository(Protocol):
    def list_page(
        self,
        spec: ResourceSpec,
        page: int,
        limit: int,
        keyword: Optional[str] = None,
        filters: Optional[dict] = None,
    ) -> Page: ...
    def list_lookup(self, spec: ResourceSpec) -> list: ...
    def create(self, spec: ResourceSpec, payload: dict, files: Optional[dict] = None) -> Any: ...
    def update(self, spec: ResourceSpec, entity_id: int, payload: dict, files: Optional[dict] = None) -> Any: ...
    def delete(self, spec: ResourceSpec, entity_id: int) -> Any: ...
    def fetch_json(self, path: str, params: Optional[dict] = None) -> Any: ...
