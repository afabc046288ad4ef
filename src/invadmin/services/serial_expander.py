from __future__ import annotations

from typing import Iterable, Optional

from invadmin.domain.errors import ValidationError
from invadmin.domain.models import Product, SerialUnit
from invadmin.services.stock_calculator import FormMode

FIELDS = ("sku", "color", "barcode", "note")

# outbound payload key for each attribute
WIRE_KEYS = {"sku": "sku", "color": "color", "barcode": "bar_code", "note": "note"}


def should_expand(product: Optional[Product], quantity: int, mode: FormMode) -> bool:
    return bool(product is not None and product.is_electronic and quantity > 0 and mode is FormMode.CREATE)


class SerialAttributeExpander:
    """Per-unit sku/color/barcode/note inputs kept as four parallel lists."""

    def __init__(self, units: Iterable[SerialUnit] = ()):
        self._values: dict[str, list[str]] = {f: [] for f in FIELDS}
        for u in units:
            for f in FIELDS:
                self._values[f].append(getattr(u, f) or "")

    def __len__(self) -> int:
        return len(self._values["sku"])

    def values(self, field: str) -> list[str]:
        return list(self._values[self._check_field(field)])

    def resize(self, quantity: int) -> None:
        quantity = max(int(quantity), 0)
        current = len(self)
        if quantity == current:
            return
        for f in FIELDS:
            seq = self._values[f]
            if quantity > current:
                seq.extend([""] * (quantity - current))
            else:
                del seq[quantity:]

    def set(self, index: int, field: str, value: object) -> None:
        seq = self._values[self._check_field(field)]
        if not 0 <= index < len(seq):
            raise IndexError(f"Serial unit {index} out of range (have {len(seq)}).")
        seq[index] = "" if value is None else str(value)

    def units(self) -> list[SerialUnit]:
        return [
            SerialUnit(sku=s, color=c, barcode=b, note=n)
            for s, c, b, n in zip(*(self._values[f] for f in FIELDS))
        ]

    def validate(self, quantity: int, is_electronic: bool) -> None:
        if not is_electronic:
            return
        skus = self._values["sku"]
        if not skus or any(not s.strip() for s in skus):
            raise ValidationError(
                "SKU is required for every unit of an electronic product.",
                code="sku_required",
                field_errors={"sku": ["SKU is required for electronic products"]},
            )
        # units travel comma-joined, so a comma inside a value splits it
        bad: dict[str, list[str]] = {}
        for f in FIELDS:
            for i, v in enumerate(self._values[f]):
                if "," in v:
                    bad.setdefault(WIRE_KEYS[f], []).append(f"Unit {i + 1}: {f} cannot contain a comma")
        if bad:
            raise ValidationError(
                next(iter(bad.values()))[0],
                code="serial_comma",
                field_errors=bad,
            )
        if len(skus) != quantity:
            raise ValidationError(
                f"SKU count must match quantity ({len(skus)} != {quantity}).",
                code="sku_count_mismatch",
                field_errors={"sku": ["SKU count must match quantity"]},
            )

    def to_payload(self, is_electronic: bool) -> dict[str, str]:
        out = {}
        for f in FIELDS:
            seq = [v.strip() for v in self._values[f]]
            if is_electronic:
                out[WIRE_KEYS[f]] = ",".join(seq)
            else:
                out[WIRE_KEYS[f]] = seq[0] if seq else ""
        return out

    @staticmethod
    def _check_field(field: str) -> str:
        if field not in FIELDS:
            raise ValueError(f"Unknown serial attribute '{field}'.")
        return field
