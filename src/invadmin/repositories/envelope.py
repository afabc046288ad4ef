"""Parsing of server payloads into domain objects.

The backend answers list requests with several envelope shapes depending on
the controller that served them. Everything is normalized here so callers
only ever see ``Page`` and the domain dataclasses.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from invadmin.domain.errors import TransportError
from invadmin.domain.models import (
    CatalogEntity,
    Page,
    Pagination,
    Product,
    ProductType,
    SerialUnit,
    StockEntry,
    normalize_status,
)
from invadmin.repositories.resources import (
    KIND_PRODUCT,
    KIND_PRODUCT_TYPE,
    KIND_STOCK,
    ResourceSpec,
)

_ENTITY_KEYS = {"id", "name", "status", "image", "images", "created_at", "updated_at"}


def _first(data: dict, *keys: str, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _int(value: object, default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _optional_int(value: object) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _decimal(value: object) -> Decimal:
    if value in (None, ""):
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def _image(raw: dict) -> Optional[str]:
    image = raw.get("image")
    if image:
        return str(image)
    images = raw.get("images")
    if isinstance(images, list) and images:
        return str(images[0])
    if isinstance(images, str) and images:
        return images
    return None


def _name_of(value: object) -> Optional[str]:
    if isinstance(value, dict):
        name = value.get("name")
        return str(name) if name is not None else None
    return None


def is_electronic_type(raw: dict) -> bool:
    if "is_electronic" in raw and raw["is_electronic"] is not None:
        return normalize_status(raw["is_electronic"]) == "active"
    return "electronic" in str(raw.get("name") or "").lower()


def parse_entity(raw: dict) -> CatalogEntity:
    return CatalogEntity(
        id=_int(raw.get("id"), 0),
        name=str(raw.get("name") or ""),
        status=normalize_status(raw.get("status")),
        image=_image(raw),
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),
        extra={k: v for k, v in raw.items() if k not in _ENTITY_KEYS},
    )


def parse_product_type(raw: dict) -> ProductType:
    base = parse_entity(raw)
    return ProductType(
        id=base.id,
        name=base.name,
        status=base.status,
        image=base.image,
        created_at=base.created_at,
        updated_at=base.updated_at,
        extra=base.extra,
        is_electronic=is_electronic_type(raw),
    )


def parse_product(raw: dict) -> Product:
    base = parse_entity(raw)
    type_raw = _first(raw, "product_type", "productType")
    return Product(
        id=base.id,
        name=base.name,
        status=base.status,
        image=base.image,
        created_at=base.created_at,
        updated_at=base.updated_at,
        extra=base.extra,
        product_type=parse_product_type(type_raw) if isinstance(type_raw, dict) else None,
    )


def parse_serial_unit(raw: dict) -> SerialUnit:
    return SerialUnit(
        sku=str(raw.get("sku") or ""),
        color=str(raw.get("color") or ""),
        barcode=str(_first(raw, "barcode", "bar_code", default="")),
        note=str(_first(raw, "notes", "note", default="")),
    )


def parse_stock_entry(raw: dict) -> StockEntry:
    serials = _first(raw, "serialLists", "serial_lists", "serials", default=[])
    return StockEntry(
        id=_optional_int(raw.get("id")),
        product_id=_optional_int(raw.get("product_id")),
        vendor_id=_optional_int(raw.get("vendor_id")),
        warehouse_id=_optional_int(raw.get("warehouse_id")),
        payment_type_id=_optional_int(raw.get("payment_type_id")),
        quantity=max(_int(raw.get("quantity"), 0), 0),
        buying_price=_decimal(raw.get("buying_price")),
        tax=_decimal(raw.get("tax")),
        selling_price=_decimal(raw.get("selling_price")),
        total_amount=_decimal(raw.get("total_amount")),
        paid_amount=_decimal(raw.get("paid_amount")),
        due_amount=_decimal(raw.get("due_amount")),
        stock_date=raw.get("stock_date"),
        expire_date=raw.get("expire_date"),
        commission=_decimal(_first(raw, "commission", "comission")),
        status=normalize_status(raw.get("status")),
        serial_units=tuple(parse_serial_unit(s) for s in serials if isinstance(s, dict)),
        product_name=_name_of(raw.get("product")),
        vendor_name=_name_of(raw.get("vendor")),
        warehouse_name=_name_of(raw.get("warehouse")),
        payment_type_name=_name_of(_first(raw, "paymentType", "payment_type")),
    )


PARSERS: dict[str, Callable[[dict], Any]] = {
    KIND_PRODUCT: parse_product,
    KIND_PRODUCT_TYPE: parse_product_type,
    KIND_STOCK: parse_stock_entry,
}


def parse_item(spec: ResourceSpec, raw: dict) -> Any:
    return PARSERS.get(spec.kind, parse_entity)(raw)


def parse_page(body: Any, spec: ResourceSpec, page: int, limit: int) -> Page:
    """Normalize any known list envelope.

    Counters come from the nested ``pagination`` block first, then the top
    level. Missing counters fall back to the requested page/limit and the
    number of items returned.
    """
    if isinstance(body, list):
        rows, meta = body, {}
    elif isinstance(body, dict):
        nested = body.get("pagination")
        nested = nested if isinstance(nested, dict) else {}
        rows = _first(nested, "data", default=None)
        if rows is None:
            rows = _first(body, "data", "items", default=[])
        meta = {**body, **nested}
    else:
        raise TransportError(f"Unexpected list payload for {spec.label}: {type(body).__name__}")

    if not isinstance(rows, list):
        raise TransportError(f"Unexpected list payload for {spec.label}: data is not a list")

    per_page = _int(_first(meta, "per_page", "perPage", "limit"), limit)
    total_items = _int(_first(meta, "total_items", "totalItems", "total"), len(rows))
    current = _int(_first(meta, "current_page", "page", "currentPage"), page)

    pagination = Pagination.build(current_page=current, per_page=per_page, total_items=total_items)
    items = [parse_item(spec, r) for r in rows if isinstance(r, dict)]
    return Page(items=items, pagination=pagination)


def field_errors(body: Any) -> dict[str, list[str]]:
    if not isinstance(body, dict):
        return {}
    errors = body.get("errors")
    if not isinstance(errors, dict):
        return {}
    out: dict[str, list[str]] = {}
    for name, messages in errors.items():
        if isinstance(messages, list):
            out[str(name)] = [str(m) for m in messages]
        elif messages:
            out[str(name)] = [str(messages)]
    return out
