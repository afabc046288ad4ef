import json
import math
import sys
from pathlib import Path
from urllib.parse import urlparse

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class FakeResponse:
    def __init__(self, status_code: int, body=None, raw: bytes | None = None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        else:
            self.content = b"" if body is None else json.dumps(body).encode("utf-8")

    def json(self):
        return json.loads(self.content.decode("utf-8"))


class FakeBackend:
    """In-memory stand-in for the admin API, plugged in as a requests session."""

    def __init__(self):
        self.headers: dict[str, str] = {}
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[dict] = []
        self._next_id = 1
        self._queued: list[FakeResponse] = []

    def seed(self, path: str, rows: list[dict]) -> None:
        table = self.tables.setdefault(path, [])
        for row in rows:
            row = dict(row)
            row.setdefault("id", self._next_id)
            self._next_id = max(self._next_id, int(row["id"])) + 1
            table.append(row)

    def fail_next(self, status: int, body=None) -> None:
        self._queued.append(FakeResponse(status, body))

    def request(self, method, url, params=None, json=None, data=None, files=None, timeout=None):
        path = urlparse(url).path
        self.calls.append(
            {"method": method, "path": path, "params": params, "json": json, "data": data, "files": files}
        )
        if self._queued:
            return self._queued.pop(0)

        parts = path.rstrip("/").split("/")
        if parts[-1].isdigit():
            base, entity_id = "/".join(parts[:-1]), int(parts[-1])
        else:
            base, entity_id = path.rstrip("/"), None
        table = self.tables.setdefault(base, [])
        body = dict(json if json is not None else (data or {}))
        if body.pop("_method", None) == "PUT":
            method = "PUT"

        if method == "GET":
            return self._list(table, params or {})
        if method == "POST":
            body["id"] = self._next_id
            self._next_id += 1
            table.append(body)
            return FakeResponse(201, {"success": True, "message": "Created", "data": body})
        row = next((r for r in table if r["id"] == entity_id), None)
        if row is None:
            return FakeResponse(404, {"success": False, "message": "Not found"})
        if method == "PUT":
            row.update(body)
            return FakeResponse(200, {"success": True, "message": "Updated", "data": row})
        if method == "DELETE":
            table.remove(row)
            return FakeResponse(200, {"success": True, "message": "Deleted"})
        return FakeResponse(405, {"message": "Method not allowed"})

    def _list(self, table, params):
        page = int(params.get("page", 1))
        limit = int(params.get("limit", 10))
        keyword = str(params.get("keyword") or params.get("search") or "").lower()
        rows = [r for r in table if keyword in str(r.get("name", "")).lower()]
        if params.get("status"):
            rows = [r for r in rows if str(r.get("status")) == str(params["status"])]
        start = (page - 1) * limit
        return FakeResponse(
            200,
            {
                "current_page": page,
                "per_page": limit,
                "total_items": len(rows),
                "total_pages": math.ceil(len(rows) / limit) if rows else 0,
                "data": rows[start:start + limit],
            },
        )

    def calls_to(self, method: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def container(backend):
    from invadmin.application.container import build_container
    from invadmin.config import ApiSettings

    return build_container(ApiSettings(base_url="http://api.test"), session=backend)
