from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from invadmin.domain.errors import ValidationError
from invadmin.domain.models import ACTIVE, StockEntry
from invadmin.repositories.contracts import CatalogRepository
from invadmin.services.stock_calculator import money

REPORT_KINDS = ("inventory", "employees", "sales")


@dataclass(frozen=True)
class StockSummary:
    total_stocks: int
    total_quantity: int
    total_value: Decimal
    total_due: Decimal
    active_stocks: int


def summarize_stocks(entries: Iterable[StockEntry]) -> StockSummary:
    entries = list(entries)
    return StockSummary(
        total_stocks=len(entries),
        total_quantity=sum(int(e.quantity) for e in entries),
        total_value=money(sum((e.quantity * e.buying_price for e in entries), Decimal("0"))),
        total_due=money(sum((e.due_amount for e in entries), Decimal("0"))),
        active_stocks=sum(1 for e in entries if e.status == ACTIVE),
    )


def _lower(value: Optional[str]) -> str:
    return (value or "").lower()


SORT_KEYS: dict[str, Callable[[StockEntry], Any]] = {
    "stock_date": lambda e: e.stock_date or "",
    "name": lambda e: _lower(e.product_name),
    "product": lambda e: _lower(e.product_name),
    "vendor": lambda e: _lower(e.vendor_name),
    "warehouse": lambda e: _lower(e.warehouse_name),
    "quantity": lambda e: int(e.quantity),
}


def sort_stocks(entries: Iterable[StockEntry], field: str = "stock_date", direction: str = "desc") -> list[StockEntry]:
    """Order stock rows for display; text columns compare case-insensitively."""
    key = SORT_KEYS.get(field)
    if key is None:
        raise ValidationError(f"Cannot sort stocks by '{field}'. Expected one of: {', '.join(SORT_KEYS)}")
    if direction not in ("asc", "desc"):
        raise ValidationError(f"Sort direction must be 'asc' or 'desc'. Received: {direction!r}")
    return sorted(entries, key=key, reverse=direction == "desc")


class ReportingService:
    def __init__(self, repo: CatalogRepository):
        self.repo = repo

    def fetch_dashboard(self) -> Any:
        return self.repo.fetch_json("/api/dashboard")

    def fetch_report(self, kind: str, **params: Any) -> Any:
        kind = (kind or "").strip().lower()
        if kind not in REPORT_KINDS:
            raise ValidationError(f"Unknown report '{kind}'. Expected one of: {', '.join(REPORT_KINDS)}")
        return self.repo.fetch_json(f"/api/reports/{kind}", params=params or None)

    def export_stocks_excel(self, path: str, entries: Iterable[StockEntry]) -> None:
        entries = list(entries)
        summary = summarize_stocks(entries)
        wb = Workbook()

        def money_fmt(cell):
            cell.number_format = "#,##0.00"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        # -------- 1) Summary --------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = "Stock Summary"
        ws["A1"].font = Font(bold=True, size=14)

        rows = [
            ("Stock records", summary.total_stocks, "int"),
            ("Total quantity", summary.total_quantity, "int"),
            ("Total value", float(summary.total_value), "money"),
            ("Total due", float(summary.total_due), "money"),
            ("Active records", summary.active_stocks, "int"),
        ]
        for i, (label, val, kind) in enumerate(rows):
            r = 3 + i
            ws[f"A{r}"] = label
            ws[f"B{r}"] = val
            if kind == "money":
                money_fmt(ws[f"B{r}"])
        set_widths(ws, {"A": 22, "B": 18})

        # -------- 2) Stock Detail --------
        ws2 = wb.create_sheet("Stock Detail")
        ws2.append([
            "Stock ID", "Date", "Product", "Vendor", "Warehouse",
            "Qty", "Buying", "Selling", "Total", "Paid", "Due", "Status", "Serials",
        ])
        bold_row(ws2, 1)

        for e in entries:
            ws2.append([
                e.id, e.stock_date or "", e.product_name or "", e.vendor_name or "", e.warehouse_name or "",
                int(e.quantity), float(e.buying_price), float(e.selling_price),
                float(e.total_amount), float(e.paid_amount), float(e.due_amount),
                e.status, ", ".join(u.sku for u in e.serial_units if u.sku),
            ])
            r = ws2.max_row
            for col in "GHIJK":
                money_fmt(ws2[f"{col}{r}"])

        ws2.freeze_panes = "A2"
        set_widths(ws2, {
            "A": 10, "B": 12, "C": 30, "D": 22, "E": 22, "F": 6, "G": 12,
            "H": 12, "I": 12, "J": 12, "K": 12, "L": 10, "M": 40,
        })
        if ws2.max_row >= 2:
            ref = f"A1:{get_column_letter(13)}{ws2.max_row}"
            tab = Table(displayName="StockDetail", ref=ref)
            tab.tableStyleInfo = TableStyleInfo(
                name="TableStyleMedium9",
                showRowStripes=True,
                showColumnStripes=False,
            )
            ws2.add_table(tab)

        wb.save(path)
