"""Converters for failures commonly raised by the standard library and pydantic."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from ..http import (
    BadRequestError,
    BusinessError,
    NotImplementedFeatureError,
    ServiceTimeoutError,
    UnauthorizedError,
)
from ..visitors import pydantic_field_errors
from .base import ExceptionConverter


class BusinessErrorConverter(ExceptionConverter[BusinessError, BusinessError]):
    """Returns the failure as-is because it already is a business error."""

    source_type = BusinessError
    target_type = BusinessError

    def convert(self, cause: BusinessError) -> BusinessError:
        return cause


class ConnectionRefusedErrorConverter(ExceptionConverter[ConnectionRefusedError, ServiceTimeoutError]):
    """Raised when the remote host and port do not accept connections."""

    source_type = ConnectionRefusedError
    target_type = ServiceTimeoutError


class TimeoutErrorConverter(ExceptionConverter[TimeoutError, ServiceTimeoutError]):
    source_type = TimeoutError
    target_type = ServiceTimeoutError


class PermissionErrorConverter(ExceptionConverter[PermissionError, UnauthorizedError]):
    """Denied access is reported like missing credentials, as 401 rather than 403."""

    source_type = PermissionError
    target_type = UnauthorizedError


class NotImplementedErrorConverter(ExceptionConverter[NotImplementedError, NotImplementedFeatureError]):
    source_type = NotImplementedError
    target_type = NotImplementedFeatureError


class PydanticValidationErrorConverter(ExceptionConverter[PydanticValidationError, BadRequestError]):
    """Keeps the offending field names so they are rendered to the caller.

    The raw pydantic message mentions model internals, hence the generic text.
    """

    source_type = PydanticValidationError
    target_type = BadRequestError

    def convert(self, cause: PydanticValidationError) -> BadRequestError:
        business_error = BadRequestError(
            "Invalid request",
            field_errors=pydantic_field_errors(cause),
        )
        business_error.__cause__ = cause
        return business_error


def default_converters() -> list[ExceptionConverter]:
    """Fresh instances of every stock converter."""

    return [
        BusinessErrorConverter(),
        ConnectionRefusedErrorConverter(),
        TimeoutErrorConverter(),
        PermissionErrorConverter(),
        NotImplementedErrorConverter(),
        PydanticValidationErrorConverter(),
    ]


__all__ = [
    "BusinessErrorConverter",
    "ConnectionRefusedErrorConverter",
    "NotImplementedErrorConverter",
    "PermissionErrorConverter",
    "PydanticValidationErrorConverter",
    "TimeoutErrorConverter",
    "default_converters",
]
