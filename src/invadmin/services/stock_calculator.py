from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from enum import Enum

CENT = Decimal("0.01")
ZERO = Decimal("0")
# magnitudes beyond 10**+-MAX_DIGITS are treated as garbage input
MAX_DIGITS = 64


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


def to_decimal(value: object) -> Decimal:
    """Coerce form input to a non-negative Decimal; blank, garbage or absurdly large input is 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        d = value
    else:
        text = str(value).strip()
        if not text:
            return ZERO
        try:
            d = Decimal(text)
        except InvalidOperation:
            return ZERO
    if not d.is_finite() or d < 0 or not -MAX_DIGITS < d.adjusted() < MAX_DIGITS:
        return ZERO
    return d


def to_quantity(value: object) -> int:
    d = to_decimal(value)
    return int(d.to_integral_value(rounding=ROUND_HALF_UP))


def _exact_prec(*values: Decimal) -> int:
    """Digits needed for +, - and * over these values to stay exact."""
    top = max(v.adjusted() for v in values)
    bottom = min(v.as_tuple().exponent for v in values)
    digits = sum(len(v.as_tuple().digits) for v in values)
    return max(28, top - bottom + 2, digits) + 2


def money(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


class StockEntryCalculator:
    def total_amount(self, quantity: object, buying_price: object) -> Decimal:
        qty, price = Decimal(to_quantity(quantity)), to_decimal(buying_price)
        with localcontext() as ctx:
            ctx.prec = _exact_prec(qty, price)
            return money(qty * price)

    def due_amount(self, total_amount: object, paid_amount: object) -> Decimal:
        total, paid = to_decimal(total_amount), to_decimal(paid_amount)
        with localcontext() as ctx:
            ctx.prec = _exact_prec(total, paid)
            return money(max(total - paid, ZERO))

    def recompute(self, fields: dict, mode: FormMode) -> tuple[Decimal, Decimal]:
        """
        Return (total_amount, due_amount) for the given form fields.

        In EDIT mode the loaded snapshot values are returned untouched so
        historical totals survive unrelated edits.
        """
        if mode is FormMode.EDIT:
            return to_decimal(fields.get("total_amount")), to_decimal(fields.get("due_amount"))
        total = self.total_amount(fields.get("quantity"), fields.get("buying_price"))
        return total, self.due_amount(total, fields.get("paid_amount"))
