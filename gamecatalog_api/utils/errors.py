"""
Failure taxonomy shared by every mutation and lookup path.

Each class carries a canonical ``error_code`` and an HTTP status so the API layer can
render any of them the same way. Raw backend messages never travel in these objects
except for ``DuplicateEntry.detail``, which is the constraint detail the client needs
to tell which value collided.
"""

from typing import Iterable


class CatalogError(Exception):
    """
    Base for every failure the engine reports to its callers.

    - message: human-friendly message (safe to show to clients)
    - fields: optional field names related to the error (e.g. ['code'])
    - error_code: canonical short code used by clients
    """

    error_code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None

    def __str__(self) -> str:
        if self.fields:
            return f"{self.message} (fields: {', '.join(self.fields)})"
        return self.message

    def to_payload(self) -> dict:
        payload = {"code": self.error_code, "error": self.message}
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        return self.status_code


class NotFound(CatalogError):
    error_code = "RESOURCE_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Resource not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields)


class NoFieldsToUpdate(CatalogError):
    error_code = "INVALID_INPUT"
    status_code = 400

    def __init__(self, message: str = "No values to update"):
        super().__init__(message)


class DuplicateEntry(CatalogError):
    error_code = "DUPLICATE_ENTRY"
    status_code = 409

    def __init__(self, message: str, *, fields: Iterable[str] | None = None, detail: str | None = None):
        super().__init__(message, fields=fields)
        self.detail = detail

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.detail:
            payload["error"] = self.detail
        return payload


class ForeignKeyNotFound(CatalogError):
    error_code = "FOREIGN_KEY_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Referenced resource not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields)


class InvalidArtifactFormat(CatalogError):
    error_code = "INVALID_INPUT"
    status_code = 400

    def __init__(self, message: str = "Invalid image format"):
        super().__init__(message)


class DeleteForbidden(CatalogError):
    error_code = "DELETE_FORBIDDEN"
    status_code = 403


class InternalFailure(CatalogError):
    error_code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


__all__ = [
    "CatalogError",
    "NotFound",
    "NoFieldsToUpdate",
    "DuplicateEntry",
    "ForeignKeyNotFound",
    "InvalidArtifactFormat",
    "DeleteForbidden",
    "InternalFailure",
]
