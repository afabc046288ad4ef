from .models import CatalogEntity, ProductType, Product, SerialUnit, StockEntry, Pagination, Page
from .errors import (
    AppError,
    ValidationError,
    NotFoundError,
    AuthorizationError,
    ServerMessageError,
    TransportError,
)

__all__ = [
    "CatalogEntity",
    "ProductType",
    "Product",
    "SerialUnit",
    "StockEntry",
    "Pagination",
    "Page",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "AuthorizationError",
    "ServerMessageError",
    "TransportError",
]
