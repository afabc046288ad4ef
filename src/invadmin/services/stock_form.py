from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from invadmin.domain.errors import ValidationError
from invadmin.domain.models import ACTIVE, Product, StockEntry, normalize_status
from invadmin.services.serial_expander import SerialAttributeExpander, should_expand
from invadmin.services.stock_calculator import (
    FormMode,
    StockEntryCalculator,
    to_decimal,
    to_quantity,
)

ID_FIELDS = ("product_id", "vendor_id", "warehouse_id", "payment_type_id")
MONEY_FIELDS = ("buying_price", "tax", "selling_price", "paid_amount", "commission")
DERIVED_FIELDS = ("total_amount", "due_amount")
TEXT_FIELDS = ("stock_date", "expire_date")


def _optional_id(value: object) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _wire_money(value: Decimal) -> str:
    return f"{value:.2f}"


class StockEntryForm:
    """
    Create/edit form state for one stock entry.

    CREATE mode recomputes total/due on every change and keeps the serial
    inputs sized to quantity for electronic products. EDIT mode keeps the
    loaded totals and serial units as they were.
    """

    def __init__(self, mode: FormMode = FormMode.CREATE, calculator: Optional[StockEntryCalculator] = None):
        self.mode = mode
        self.calc = calculator or StockEntryCalculator()
        self.entry_id: Optional[int] = None
        self.product: Optional[Product] = None
        self.fields: dict = {
            "product_id": None,
            "vendor_id": None,
            "warehouse_id": None,
            "payment_type_id": None,
            "quantity": 1,
            "buying_price": Decimal("0"),
            "tax": Decimal("0"),
            "selling_price": Decimal("0"),
            "paid_amount": Decimal("0"),
            "commission": Decimal("0"),
            "total_amount": Decimal("0.00"),
            "due_amount": Decimal("0.00"),
            "stock_date": date.today().isoformat(),
            "expire_date": None,
            "status": ACTIVE,
        }
        self.serials = SerialAttributeExpander()
        self.serials.resize(1)
        self.errors: dict[str, list[str]] = {}

    @classmethod
    def for_create(cls, calculator: Optional[StockEntryCalculator] = None) -> "StockEntryForm":
        return cls(FormMode.CREATE, calculator)

    @classmethod
    def for_edit(
        cls,
        entry: StockEntry,
        product: Optional[Product] = None,
        calculator: Optional[StockEntryCalculator] = None,
    ) -> "StockEntryForm":
        form = cls(FormMode.EDIT, calculator)
        form.entry_id = entry.id
        form.product = product
        form.fields.update(
            product_id=entry.product_id,
            vendor_id=entry.vendor_id,
            warehouse_id=entry.warehouse_id,
            payment_type_id=entry.payment_type_id,
            quantity=entry.quantity,
            buying_price=entry.buying_price,
            tax=entry.tax,
            selling_price=entry.selling_price,
            paid_amount=entry.paid_amount,
            commission=entry.commission,
            total_amount=entry.total_amount,
            due_amount=entry.due_amount,
            stock_date=entry.stock_date,
            expire_date=entry.expire_date,
            status=entry.status,
        )
        if entry.serial_units:
            form.serials = SerialAttributeExpander(entry.serial_units)
        return form

    @property
    def quantity(self) -> int:
        return int(self.fields["quantity"])

    @property
    def is_electronic(self) -> bool:
        return bool(self.product and self.product.is_electronic)

    def select_product(self, product: Optional[Product]) -> None:
        self.product = product
        self.fields["product_id"] = product.id if product else None
        self.errors.pop("product_id", None)
        self._sync()

    def set_field(self, name: str, value: object) -> None:
        if name in DERIVED_FIELDS:
            raise ValidationError(f"'{name}' is derived and cannot be edited.", code="derived_field")
        if name == "quantity":
            self.fields[name] = to_quantity(value)
        elif name in MONEY_FIELDS:
            self.fields[name] = to_decimal(value)
        elif name in ID_FIELDS:
            self.fields[name] = _optional_id(value)
        elif name == "status":
            self.fields[name] = normalize_status(value)
        elif name in TEXT_FIELDS:
            self.fields[name] = (str(value).strip() or None) if value is not None else None
        else:
            raise ValidationError(f"Unknown stock field '{name}'.", code="unknown_field")
        self.errors.pop(name, None)
        self._sync()

    def set_serial(self, index: int, field: str, value: object) -> None:
        self.serials.set(index, field, value)
        self.errors.pop(field if field != "barcode" else "bar_code", None)

    def _sync(self) -> None:
        if self.mode is not FormMode.CREATE:
            return
        total, due = self.calc.recompute(self.fields, self.mode)
        self.fields["total_amount"] = total
        self.fields["due_amount"] = due
        if should_expand(self.product, self.quantity, self.mode):
            self.serials.resize(self.quantity)

    def validate(self) -> None:
        errors: dict[str, list[str]] = {}
        if self.fields["product_id"] is None:
            errors["product_id"] = ["The product field is required."]
        if self.mode is FormMode.CREATE and self.quantity < 1:
            errors["quantity"] = ["The quantity must be at least 1."]
        if errors:
            self.errors = errors
            first = next(iter(errors.values()))[0]
            raise ValidationError(first, code="invalid_stock", field_errors=errors)

        check_serials = self.mode is FormMode.CREATE or self._serials_changed()
        if check_serials:
            try:
                self.serials.validate(self.quantity, self.is_electronic)
            except ValidationError as e:
                self.errors = dict(e.field_errors)
                raise

    def _serials_changed(self) -> bool:
        return any(u.sku.strip() for u in self.serials.units())

    def build_payload(self) -> dict:
        self.validate()
        payload = _main_payload({**self.fields, "quantity": self.quantity})
        if self.mode is FormMode.CREATE or self._serials_changed():
            payload.update(self.serials.to_payload(self.is_electronic))
        return payload


def _main_payload(values: dict) -> dict:
    payload = {k: values.get(k) for k in ID_FIELDS}
    payload["quantity"] = int(values.get("quantity") or 0)
    for k in MONEY_FIELDS + DERIVED_FIELDS:
        payload["comission" if k == "commission" else k] = _wire_money(to_decimal(values.get(k)))
    payload["stock_date"] = values.get("stock_date")
    payload["expire_date"] = values.get("expire_date")
    payload["status"] = values.get("status")
    return {k: v for k, v in payload.items() if v is not None}


def record_payload(entry: StockEntry) -> dict:
    """Main stock fields as the server expects them, serial data excluded."""
    values = {k: getattr(entry, k) for k in ID_FIELDS + MONEY_FIELDS + DERIVED_FIELDS + TEXT_FIELDS}
    return _main_payload({**values, "quantity": entry.quantity, "status": entry.status})
