"""Errors surfaced by the reconciliation engine and report lifecycle.

Every error carries a generic ``user_message`` suitable for display; the exception
text itself holds the internal detail and is meant for logs.
"""

from __future__ import annotations

from typing import ClassVar


class FuelReconError(Exception):
    user_message: ClassVar[str] = "Something went wrong. Please retry."


class NotFoundError(FuelReconError, LookupError):
    """Raised when a station or report does not exist."""

    user_message: ClassVar[str] = "That station or report could not be found."

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} {key} not found")
        self.kind = kind
        self.key = key


class InvalidInputError(FuelReconError, ValueError):
    """Raised for malformed submissions, e.g. a non-positive price or an empty fuel type."""

    user_message: ClassVar[str] = "That value could not be accepted. Please check it and retry."


class CycleResetConflictError(FuelReconError):
    """Raised when starting a reporting cycle could not be applied as one unit."""


class UpstreamUnavailableError(FuelReconError):
    """Raised by store adapters when a collaborator fetch or write fails."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


__all__ = [
    "CycleResetConflictError",
    "FuelReconError",
    "InvalidInputError",
    "NotFoundError",
    "UpstreamUnavailableError",
]
