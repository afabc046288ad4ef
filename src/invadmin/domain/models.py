from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, Optional, TypeVar

ACTIVE = "active"
INACTIVE = "inactive"

_TRUTHY_STATUS = {"active", "1", "true", "yes", "on"}

T = TypeVar("T")


def normalize_status(value: object) -> str:
    if isinstance(value, bool):
        return ACTIVE if value else INACTIVE
    if isinstance(value, (int, float)):
        return ACTIVE if value else INACTIVE
    if value is None:
        return INACTIVE
    return ACTIVE if str(value).strip().lower() in _TRUTHY_STATUS else INACTIVE


def flip_status(value: str) -> str:
    return INACTIVE if normalize_status(value) == ACTIVE else ACTIVE


@dataclass(frozen=True)
class CatalogEntity:
    id: int
    name: str
    status: str = ACTIVE
    image: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE


@dataclass(frozen=True)
class ProductType(CatalogEntity):
    is_electronic: bool = False


@dataclass(frozen=True)
class Product(CatalogEntity):
    product_type: Optional[ProductType] = None

    @property
    def is_electronic(self) -> bool:
        return bool(self.product_type and self.product_type.is_electronic)


@dataclass(frozen=True)
class SerialUnit:
    sku: str
    color: str = ""
    barcode: str = ""
    note: str = ""


@dataclass(frozen=True)
class StockEntry:
    id: Optional[int]
    product_id: Optional[int]
    vendor_id: Optional[int]
    warehouse_id: Optional[int]
    payment_type_id: Optional[int]
    quantity: int
    buying_price: Decimal
    tax: Decimal
    selling_price: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    due_amount: Decimal
    stock_date: Optional[str]
    expire_date: Optional[str] = None
    commission: Decimal = Decimal("0")
    status: str = ACTIVE
    serial_units: tuple[SerialUnit, ...] = ()
    product_name: Optional[str] = None
    vendor_name: Optional[str] = None
    warehouse_name: Optional[str] = None
    payment_type_name: Optional[str] = None


@dataclass(frozen=True)
class Pagination:
    current_page: int
    per_page: int
    total_items: int
    total_pages: int

    @classmethod
    def build(cls, current_page: int, per_page: int, total_items: int) -> "Pagination":
        per_page = max(int(per_page), 1)
        total_items = max(int(total_items), 0)
        total_pages = math.ceil(total_items / per_page)
        current = min(max(int(current_page), 1), max(total_pages, 1))
        return cls(current_page=current, per_page=per_page, total_items=total_items, total_pages=total_pages)

    @property
    def last_page(self) -> int:
        return max(self.total_pages, 1)

    def contains(self, page: int) -> bool:
        return 1 <= page <= self.last_page


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    pagination: Pagination
