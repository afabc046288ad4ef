from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from invadmin.domain.errors import AppError, ServerMessageError, TransportError, ValidationError
from invadmin.domain.models import Page, Pagination, StockEntry, flip_status
from invadmin.repositories.contracts import CatalogRepository
from invadmin.repositories.resources import RESEND_ALL, ResourceSpec, get_resource
from invadmin.services.stock_calculator import FormMode
from invadmin.services.stock_form import StockEntryForm, record_payload
from invadmin.services.stock_service import StockService

log = logging.getLogger(__name__)

SAVING = "saving"


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


def _log_notice(notice: Notice) -> None:
    log.info("notice level=%s message=%s", notice.level, notice.message)


def describe_error(exc: AppError, fallback: str) -> str:
    if isinstance(exc, TransportError):
        return fallback
    if isinstance(exc, ServerMessageError) and not exc.server_message:
        return fallback
    return str(exc) or fallback


class SearchDebouncer:
    """Coalesces keystrokes: a term fires once nothing new arrived for quiet_ms."""

    def __init__(self, quiet_ms: int = 500, clock: Callable[[], float] = time.monotonic):
        self.quiet = quiet_ms / 1000.0
        self.clock = clock
        self._pending: Optional[str] = None
        self._last_input: float = 0.0

    @property
    def pending(self) -> Optional[str]:
        return self._pending

    def push(self, term: str, now: Optional[float] = None) -> None:
        self._pending = term
        self._last_input = self.clock() if now is None else now

    def due(self, now: Optional[float] = None) -> Optional[str]:
        if self._pending is None:
            return None
        now = self.clock() if now is None else now
        if now - self._last_input < self.quiet:
            return None
        term, self._pending = self._pending, None
        return term


class CatalogController:
    """
    List/create/update/toggle/delete flow shared by every catalog page.

    Failures never escape: they clear the list (fetch) or fill form_errors
    (save) and are reported through ``notify``.
    """

    def __init__(
        self,
        repo: CatalogRepository,
        spec: ResourceSpec | str,
        page_size: int = 10,
        notify: Optional[Callable[[Notice], None]] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        debounce_ms: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.repo = repo
        self.spec = get_resource(spec) if isinstance(spec, str) else spec
        self.notify = notify or _log_notice
        self.confirm = confirm or (lambda _msg: True)
        self.debouncer = SearchDebouncer(debounce_ms, clock)

        self.state = LoadState.IDLE
        self.items: list = []
        self.pagination = Pagination.build(1, page_size, 0)
        self.keyword = ""
        self.filters: dict[str, Any] = {}
        self.form_errors: dict[str, list[str]] = {}
        self.lookups: dict[str, list] = {}
        self.in_flight: dict[str, str] = {}
        self.last_notice: Optional[Notice] = None

        self._issued_seq = 0
        self._applied_seq = 0

    # ---- notices ----
    def _emit(self, level: str, message: str) -> None:
        self.last_notice = Notice(level, message)
        self.notify(self.last_notice)

    # ---- fetching ----
    def mount(self) -> None:
        self.load_lookups()
        self.refresh()

    def begin_fetch(self) -> int:
        self._issued_seq += 1
        self.state = LoadState.LOADING
        return self._issued_seq

    def apply_page(self, seq: int, page: Page) -> bool:
        if seq <= self._applied_seq:
            log.info("stale_page_dropped resource=%s seq=%s applied=%s", self.spec.key, seq, self._applied_seq)
            return False
        self._applied_seq = seq
        self.items = list(page.items)
        self.pagination = page.pagination
        self.state = LoadState.LOADED
        return True

    def fail_fetch(self, seq: int, exc: AppError) -> bool:
        if seq <= self._applied_seq:
            return False
        self._applied_seq = seq
        self.items = []
        self.state = LoadState.ERROR
        log.warning("fetch_failed resource=%s error=%s", self.spec.key, exc)
        self._emit("error", describe_error(exc, f"Failed to fetch {self.spec.label}"))
        return True

    def fetch(self, page: Optional[int] = None) -> bool:
        target = self.pagination.current_page if page is None else int(page)
        seq = self.begin_fetch()
        try:
            result = self.repo.list_page(
                self.spec,
                page=target,
                limit=self.pagination.per_page,
                keyword=self.keyword or None,
                filters=self.filters,
            )
        except AppError as e:
            self.fail_fetch(seq, e)
            return False
        return self.apply_page(seq, result)

    def refresh(self) -> bool:
        return self.fetch()

    def go_to_page(self, page: int) -> bool:
        if not self.pagination.contains(int(page)):
            return False
        return self.fetch(int(page))

    def set_page_size(self, per_page: int) -> bool:
        if int(per_page) < 1:
            raise ValidationError("Page size must be >= 1.")
        self.pagination = Pagination.build(1, int(per_page), self.pagination.total_items)
        return self.fetch(1)

    def set_filters(self, **filters: Any) -> bool:
        unknown = set(filters) - set(self.spec.filters)
        if unknown:
            raise ValidationError(f"Unsupported filter(s) for {self.spec.label}: {', '.join(sorted(unknown))}")
        self.filters.update(filters)
        return self.fetch(1)

    def search(self, term: str, now: Optional[float] = None) -> None:
        self.debouncer.push((term or "").strip(), now)

    def poll(self, now: Optional[float] = None) -> bool:
        term = self.debouncer.due(now)
        if term is None:
            return False
        self.keyword = term
        return self.fetch(1)

    # ---- related lists ----
    def load_lookups(self) -> dict[str, list]:
        for key in self.spec.lookups:
            related = get_resource(key)
            try:
                self.lookups[key] = self.repo.list_lookup(related)
            except AppError as e:
                self.lookups[key] = []
                log.warning("lookup_failed resource=%s lookup=%s error=%s", self.spec.key, key, e)
                self._emit("error", describe_error(e, f"Failed to fetch {related.label}"))
        return self.lookups

    def display_name(self, lookup: str, entity_id: object) -> str:
        if entity_id in (None, ""):
            return ""
        for item in self.lookups.get(lookup, []):
            if str(getattr(item, "id", "")) == str(entity_id):
                return getattr(item, "name", "") or ""
        return ""

    # ---- per-row operation markers ----
    def is_busy(self, key: str) -> bool:
        return key in self.in_flight

    def _claim(self, key: str, operation: str) -> bool:
        if key in self.in_flight:
            log.info("operation_refused resource=%s key=%s", self.spec.key, key)
            return False
        self.in_flight[key] = operation
        return True

    def _release(self, key: str) -> None:
        self.in_flight.pop(key, None)

    # ---- mutations ----
    def _save(self, action: str, call: Callable[[], Any]) -> bool:
        if not self._claim(SAVING, action):
            return False
        try:
            body = call()
        except ValidationError as e:
            self.form_errors = dict(e.field_errors)
            self._emit("error", str(e))
            return False
        except AppError as e:
            self._emit("error", describe_error(e, f"Failed to save {self.spec.label}"))
            return False
        finally:
            self._release(SAVING)

        self.form_errors = {}
        log.info("entity_%s resource=%s", action, self.spec.key)
        self._emit("success", _server_message(body) or f"Saved {self.spec.label} successfully")
        self.fetch()
        return True

    def create(self, payload: dict, files: Optional[dict] = None) -> bool:
        return self._save("created", lambda: self.repo.create(self.spec, payload, files))

    def update(self, entity_id: int, payload: dict, files: Optional[dict] = None) -> bool:
        return self._save("updated", lambda: self.repo.update(self.spec, entity_id, payload, files))

    def submit_stock(self, form: StockEntryForm, stocks: Optional[StockService] = None) -> bool:
        """Send a stock form the way create/update do; errors land on the form."""
        stocks = stocks or StockService(self.repo)
        action = "updated" if form.mode is FormMode.EDIT else "created"
        ok = self._save(action, lambda: {"message": stocks.submit(form)})
        if not ok and self.form_errors:
            form.errors = dict(self.form_errors)
        return ok

    def status_payload(self, entity: Any) -> dict:
        new_status = flip_status(entity.status)
        if isinstance(entity, StockEntry):
            payload = record_payload(entity)
        elif self.spec.toggle_fields == RESEND_ALL:
            payload = {"name": entity.name, **entity.extra}
        else:
            payload = {}
            for name in self.spec.toggle_fields:
                value = entity.name if name == "name" else entity.extra.get(name)
                if value is not None:
                    payload[name] = value
        payload["status"] = self.spec.encode_status(new_status)
        return payload

    def toggle_status(self, entity: Any) -> bool:
        key = f"status-{entity.id}"
        if not self._claim(key, "status"):
            return False
        try:
            self.repo.update(self.spec, entity.id, self.status_payload(entity))
        except AppError as e:
            self._emit("error", describe_error(e, f"Failed to update {self.spec.label} status"))
            return False
        finally:
            self._release(key)

        log.info("status_toggled resource=%s id=%s", self.spec.key, entity.id)
        self._emit("success", "Status updated successfully")
        self.fetch()
        return True

    def delete(self, entity_id: int) -> bool:
        if not self.confirm(f"Are you sure you want to delete this {self.spec.label} record?"):
            return False
        key = f"delete-{entity_id}"
        if not self._claim(key, "delete"):
            return False
        try:
            body = self.repo.delete(self.spec, entity_id)
        except AppError as e:
            self._emit("error", describe_error(e, f"Failed to delete {self.spec.label}"))
            return False
        finally:
            self._release(key)

        log.info("entity_deleted resource=%s id=%s", self.spec.key, entity_id)
        self._emit("success", _server_message(body) or f"Deleted {self.spec.label} successfully")
        current = self.pagination.current_page
        if len(self.items) == 1 and current > 1:
            self.fetch(current - 1)
        else:
            self.fetch(current)
        return True


def _server_message(body: Any) -> Optional[str]:
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None
