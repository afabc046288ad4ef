from __future__ import annotations

import logging

from openpyxl import load_workbook

from invadmin.domain.errors import ValidationError
from invadmin.services.stock_calculator import FormMode
from invadmin.services.stock_form import StockEntryForm

log = logging.getLogger(__name__)

COLUMNS = ("sku", "color", "barcode", "note")


class ExcelService:
    def import_serials_excel(self, path: str, form: StockEntryForm) -> tuple[int, int]:
        """
        Fill the form's per-unit inputs from a sheet.
        Headers:
          sku | color | barcode | note     (only sku is required)

        For electronic products the quantity follows the number of rows read.
        """
        if form.mode is not FormMode.CREATE:
            raise ValidationError("Serials can only be imported into a new stock entry.")

        wb = load_workbook(path, read_only=True)
        ws = wb.active

        headers = {}
        for col, v in enumerate(next(ws.iter_rows(min_row=1, max_row=1, values_only=True), ()), start=1):
            if isinstance(v, str):
                headers[v.strip().lower()] = col
        if "sku" not in headers:
            wb.close()
            raise ValidationError("Missing column header: sku")

        units: list[dict[str, str]] = []
        skipped = 0
        for row in ws.iter_rows(min_row=2, values_only=True):
            values = {c: _cell(row, headers.get(c)) for c in COLUMNS}
            if not values["sku"]:
                skipped += 1
                continue
            units.append(values)
        wb.close()

        if not units:
            return 0, skipped

        if form.is_electronic:
            form.set_field("quantity", len(units))
        else:
            units = units[:1]

        for i, unit in enumerate(units):
            for c in COLUMNS:
                form.set_serial(i, c, unit[c])

        log.info("serials_imported path=%s rows=%s skipped=%s", path, len(units), skipped)
        return len(units), skipped


def _cell(row: tuple, col: int | None) -> str:
    if col is None or col > len(row):
        return ""
    v = row[col - 1]
    if v is None:
        return ""
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return str(v).strip()
