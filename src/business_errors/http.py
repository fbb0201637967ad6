"""Stock business exceptions, their error codes and HTTP status roots."""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus
from typing import Iterable

from .core.errors import ApplicationError, ErrorDetails
from .schemas import FieldErrorPayload


class BusinessError(ApplicationError):
    """Normalized, business-meaningful failure produced by exception converters."""

    default_message = "Business error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: ErrorDetails = None,
        field_errors: Iterable[FieldErrorPayload] = (),
    ) -> None:
        super().__init__(message or self.default_message, details=details)
        self.field_errors = list(field_errors)


class BadRequestError(BusinessError):
    default_message = "Bad request"


class UnauthorizedError(BusinessError):
    default_message = "Unauthorized"


class ForbiddenError(BusinessError):
    default_message = "Forbidden"


class NotFoundError(BusinessError):
    default_message = "Not found"


class ConflictError(BusinessError):
    default_message = "Conflict"


class PayloadTooLargeError(BusinessError):
    default_message = "Payload too large"


class InternalServerError(BusinessError):
    default_message = "Internal server error"


class NotImplementedFeatureError(BusinessError):
    default_message = "Not implemented"


class ServiceUnavailableError(BusinessError):
    default_message = "Service unavailable"


class ServiceTimeoutError(BusinessError):
    """An upstream service did not answer or refused the connection."""

    default_message = "Service timeout"


class CommonErrorCode(str, Enum):
    """Error codes for the stock business exceptions."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    SERVICE_TIMEOUT = "SERVICE_TIMEOUT"


_EXCEPTION_CLASSES: dict[CommonErrorCode, type[BusinessError]] = {
    CommonErrorCode.BAD_REQUEST: BadRequestError,
    CommonErrorCode.UNAUTHORIZED: UnauthorizedError,
    CommonErrorCode.FORBIDDEN: ForbiddenError,
    CommonErrorCode.NOT_FOUND: NotFoundError,
    CommonErrorCode.CONFLICT: ConflictError,
    CommonErrorCode.PAYLOAD_TOO_LARGE: PayloadTooLargeError,
    CommonErrorCode.INTERNAL_SERVER_ERROR: InternalServerError,
    CommonErrorCode.NOT_IMPLEMENTED: NotImplementedFeatureError,
    CommonErrorCode.SERVICE_UNAVAILABLE: ServiceUnavailableError,
    CommonErrorCode.SERVICE_TIMEOUT: ServiceTimeoutError,
}


def exception_class_for(code: CommonErrorCode) -> type[BusinessError] | None:
    """Resolve the authoritative exception class of a stock error code."""

    return _EXCEPTION_CLASSES.get(code)


COMMON_STATUS_ROOTS: tuple[tuple[type[BusinessError], HTTPStatus], ...] = (
    (BadRequestError, HTTPStatus.BAD_REQUEST),
    (UnauthorizedError, HTTPStatus.UNAUTHORIZED),
    (ForbiddenError, HTTPStatus.FORBIDDEN),
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (ConflictError, HTTPStatus.CONFLICT),
    (PayloadTooLargeError, HTTPStatus.REQUEST_ENTITY_TOO_LARGE),
    (InternalServerError, HTTPStatus.INTERNAL_SERVER_ERROR),
    (NotImplementedFeatureError, HTTPStatus.NOT_IMPLEMENTED),
    (ServiceUnavailableError, HTTPStatus.SERVICE_UNAVAILABLE),
    (ServiceTimeoutError, HTTPStatus.GATEWAY_TIMEOUT),
)


__all__ = [
    "BadRequestError",
    "BusinessError",
    "COMMON_STATUS_ROOTS",
    "CommonErrorCode",
    "ConflictError",
    "ForbiddenError",
    "InternalServerError",
    "NotFoundError",
    "NotImplementedFeatureError",
    "PayloadTooLargeError",
    "ServiceTimeoutError",
    "ServiceUnavailableError",
    "UnauthorizedError",
    "exception_class_for",
]
