"""Exception hierarchy for failures raised by the error mapping machinery itself."""

from __future__ import annotations

from typing import Any, Mapping

ErrorDetails = Mapping[str, Any] | None


class ApplicationError(Exception):
    """Base exception carrying optional structured details."""

    def __init__(self, message: str, *, details: ErrorDetails = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def __str__(self) -> str:  # pragma: no cover - mirrors Exception.__str__
        return self.message


class ConfigurationError(ApplicationError):
    """Raised at boot when registries or the catalog cannot be built consistently.

    Covers masked type orderings, duplicate error code or status root claims,
    converters failing their self-test and missing mandatory defaults. These
    must abort startup.
    """


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "ErrorDetails",
]
