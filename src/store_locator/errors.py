"""Typed failures raised by the store geospatial engine.

Every error carries a ``kind`` tag and a ``client_error`` flag. The API layer uses
the flag to choose between client (400) and server (500) responses, and reports
the tag next to the human readable message.
"""

from __future__ import annotations


class StoreLocatorError(Exception):
    """Base class for all engine failures."""

    kind = "StoreLocatorError"
    client_error = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.message}


class NormalizationError(StoreLocatorError):
    """A location string or coordinate pair could not be turned into a GeoPoint."""

    kind = "NormalizationError"
    client_error = True


class MalformedInput(NormalizationError):
    kind = "MalformedInput"


class NonNumericToken(NormalizationError):
    kind = "NonNumericToken"

    def __init__(self, token: str, message: str | None = None) -> None:
        super().__init__(message or f"Coordinates must be valid finite numbers, got: {token!r}")
        self.token = token


class OutOfBounds(NormalizationError):
    kind = "OutOfBounds"

    def __init__(self, field: str, value: float) -> None:
        limit = 180 if field == "longitude" else 90
        super().__init__(f"{field.capitalize()} must be between -{limit} and {limit}, got: {value}")
        self.field = field
        self.value = value


class InvalidQuery(StoreLocatorError):
    """Query parameters rejected before reaching storage."""

    kind = "InvalidQuery"
    client_error = True


class IndexUnavailable(StoreLocatorError):
    kind = "IndexUnavailable"


class StorageUnavailable(StoreLocatorError):
    kind = "StorageUnavailable"


class ImportFailure(StoreLocatorError):
    kind = "ImportFailure"


class EmptyOrMalformedSource(ImportFailure):
    kind = "EmptyOrMalformedSource"
