from __future__ import annotations


class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    def __init__(self, message: str, code: str | None = None, field_errors: dict[str, list[str]] | None = None):
        super().__init__(message)
        self.code = code or message
        self.field_errors = field_errors or {}


class NotFoundError(AppError):
    pass


class AuthorizationError(AppError):
    pass


class ServerMessageError(AppError):
    def __init__(self, message: str | None, status: int | None = None):
        super().__init__(message or f"Server error (status {status}).")
        self.server_message = message
        self.status = status


class TransportError(AppError):
    pass
