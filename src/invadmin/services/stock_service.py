from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from invadmin.domain.errors import ValidationError
from invadmin.domain.models import Product, ProductType, StockEntry
from invadmin.repositories.contracts import CatalogRepository
from invadmin.repositories.resources import get_resource
from invadmin.services.stock_calculator import FormMode
from invadmin.services.stock_form import StockEntryForm

log = logging.getLogger("invadmin.stocks")


def attach_product_types(products: list[Product], types: list[ProductType]) -> list[Product]:
    by_id = {t.id: t for t in types}
    out = []
    for p in products:
        if p.product_type is None:
            type_id = p.extra.get("product_type_id")
            try:
                ptype = by_id.get(int(type_id)) if type_id is not None else None
            except (TypeError, ValueError):
                ptype = None
            if ptype is not None:
                p = replace(p, product_type=ptype)
        out.append(p)
    return out


class StockService:
    def __init__(self, repo: CatalogRepository):
        self.repo = repo
        self.spec = get_resource("stocks")

    def product_catalog(self) -> list[Product]:
        products = self.repo.list_lookup(get_resource("products"))
        types = self.repo.list_lookup(get_resource("product-type"))
        return attach_product_types(products, types)

    def open_create(self) -> StockEntryForm:
        return StockEntryForm.for_create()

    def open_edit(self, entry: StockEntry, products: Optional[list[Product]] = None) -> StockEntryForm:
        product = None
        if entry.product_id is not None:
            for p in products or []:
                if p.id == entry.product_id:
                    product = p
                    break
        return StockEntryForm.for_edit(entry, product)

    def submit(self, form: StockEntryForm) -> str:
        """
        Validate and send the form.

        Raises ValidationError (and touches no network) when the form is
        invalid; transport and server errors propagate to the caller.
        """
        payload = form.build_payload()
        try:
            if form.mode is FormMode.EDIT:
                if form.entry_id is None:
                    raise ValidationError("Cannot update a stock entry without an id.", code="missing_id")
                body = self.repo.update(self.spec, form.entry_id, payload)
                action = "updated"
            else:
                body = self.repo.create(self.spec, payload)
                action = "created"
        except ValidationError as e:
            if e.field_errors:
                form.errors = dict(e.field_errors)
            raise

        log.info(
            "stock_%s id=%s product_id=%s qty=%s total=%s due=%s serials=%s",
            action,
            form.entry_id,
            payload.get("product_id"),
            payload.get("quantity"),
            payload.get("total_amount"),
            payload.get("due_amount"),
            len(form.serials) if form.is_electronic else 0,
        )
        message = body.get("message") if isinstance(body, dict) else None
        return str(message or f"Stock {action} successfully!")
