from .stock_calculator import StockEntryCalculator, FormMode
from .serial_expander import SerialAttributeExpander
from .stock_form import StockEntryForm
from .stock_service import StockService
from .catalog_service import CatalogController, LoadState, Notice
from .reporting_service import ReportingService
from .excel_service import ExcelService

__all__ = [
    "StockEntryCalculator",
    "FormMode",
    "SerialAttributeExpander",
    "StockEntryForm",
    "StockService",
    "CatalogController",
    "LoadState",
    "Notice",
    "ReportingService",
    "ExcelService",
]
