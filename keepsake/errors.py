"""Typed failures raised by the store, the upload storage and the facade.

Each error carries the HTTP status the API server answers with, so the
transport maps them without knowing the individual types.
"""

from __future__ import annotations

from typing import Any


class KeepsakeError(Exception):
    """Base class for all domain failures."""

    status: int = 500

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the JSON error body."""
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class NotFound(KeepsakeError):
    """A referenced entity id does not exist."""

    status = 404


class ValidationRejected(KeepsakeError):
    """Malformed or missing request input."""

    status = 400


class StorageUnavailable(KeepsakeError):
    """The backing database could not be reached or failed mid-statement."""

    status = 503


class UploadFailure(KeepsakeError):
    """Writing an uploaded photo to blob storage failed."""

    status = 502
