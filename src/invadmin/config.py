from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import sys
from typing import Mapping

from invadmin.domain.errors import ValidationError


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    logs_dir: Path
    exports_dir: Path


@dataclass(frozen=True)
class ApiSettings:
    base_url: str = "http://localhost:8000"
    token: str | None = None
    timeout: float = 10.0
    page_size: int = 10
    search_debounce_ms: int = 500

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ApiSettings":
        env = os.environ if env is None else env
        base_url = (env.get("INVADMIN_API_URL") or cls.base_url).strip().rstrip("/")
        token = (env.get("INVADMIN_API_TOKEN") or "").strip() or None
        return cls(
            base_url=base_url,
            token=token,
            timeout=_number(env, "INVADMIN_TIMEOUT", cls.timeout, float),
            page_size=_number(env, "INVADMIN_PAGE_SIZE", cls.page_size, int),
            search_debounce_ms=_number(env, "INVADMIN_SEARCH_DEBOUNCE_MS", cls.search_debounce_ms, int),
        )


def _number(env: Mapping[str, str], key: str, default, cast):
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError as exc:
        raise ValidationError(f"{key} must be a number. Received: {raw!r}") from exc
    if value <= 0:
        raise ValidationError(f"{key} must be > 0. Received: {raw!r}")
    return value


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "InventoryAdmin") -> AppPaths:
    if sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"
    exports = base / "exports"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)
    exports.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, logs_dir=logs, exports_dir=exports)
