from __future__ import annotations

from dataclasses import dataclass

from invadmin.domain.errors import NotFoundError

# How a resource's status travels on the wire.
STATUS_WORD = "word"  # "active" / "inactive"
STATUS_FLAG = "flag"  # "1" / "0"

KIND_ENTITY = "entity"
KIND_PRODUCT = "product"
KIND_PRODUCT_TYPE = "product_type"
KIND_STOCK = "stock"

RESEND_ALL = ("*",)


@dataclass(frozen=True)
class ResourceSpec:
    key: str
    label: str
    path: str
    kind: str = KIND_ENTITY
    search_param: str = "keyword"
    file_field: str = "image"
    status_encoding: str = STATUS_WORD
    toggle_fields: tuple[str, ...] = ("name",)
    lookups: tuple[str, ...] = ()
    filters: tuple[str, ...] = ("status",)
    method_override: bool = False

    def encode_status(self, status: str) -> str:
        if self.status_encoding == STATUS_FLAG:
            return "1" if status == "active" else "0"
        return status


RESOURCES: dict[str, ResourceSpec] = {
    spec.key: spec
    for spec in (
        ResourceSpec("brands", "brands", "/api/brands", method_override=True),
        ResourceSpec(
            "categories",
            "categories",
            "/api/categories",
            search_param="search",
            file_field="images[]",
            method_override=True,
        ),
        ResourceSpec(
            "sub-categories",
            "sub categories",
            "/api/sub-categories",
            toggle_fields=("name", "category_id"),
            lookups=("categories",),
            filters=("status", "cat_id"),
            method_override=True,
        ),
        ResourceSpec(
            "sub-items",
            "sub items",
            "/api/sub-items",
            toggle_fields=("name", "sub_category_id"),
            lookups=("sub-categories",),
            method_override=True,
        ),
        ResourceSpec(
            "products",
            "products",
            "/api/products",
            kind=KIND_PRODUCT,
            toggle_fields=(),
            lookups=("categories", "brands", "sub-categories", "sub-items", "units", "product-type"),
            filters=("status", "cat_id"),
            method_override=True,
        ),
        ResourceSpec("product-type", "product types", "/api/product-type", kind=KIND_PRODUCT_TYPE),
        ResourceSpec("units", "units", "/api/units"),
        ResourceSpec(
            "vendors",
            "vendors",
            "/api/vendors",
            toggle_fields=("name", "shop_name", "email", "contact", "address"),
            method_override=True,
        ),
        ResourceSpec(
            "warehouses",
            "warehouses",
            "/api/warehouses",
            status_encoding=STATUS_FLAG,
            toggle_fields=("name", "address"),
        ),
        ResourceSpec(
            "payment-types",
            "payment types",
            "/api/payment-types",
            status_encoding=STATUS_FLAG,
            toggle_fields=("name", "type"),
            method_override=True,
        ),
        ResourceSpec(
            "stocks",
            "stocks",
            "/api/stocks",
            kind=KIND_STOCK,
            toggle_fields=RESEND_ALL,
            lookups=("products", "vendors", "warehouses", "payment-types"),
            filters=("status", "warehouse_id"),
            method_override=True,
        ),
        ResourceSpec("serial-list", "serials", "/api/serial-list", toggle_fields=("sku",)),
        ResourceSpec("variants", "variants", "/api/variants", lookups=("products",)),
        ResourceSpec("transaction", "transactions", "/api/transaction", toggle_fields=RESEND_ALL),
    )
}


def get_resource(key: str) -> ResourceSpec:
    try:
        return RESOURCES[key]
    except KeyError:
        raise NotFoundError(f"Unknown resource '{key}'.") from None
