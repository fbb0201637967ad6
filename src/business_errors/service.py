"""End-to-end classification of a failure into an error code, status and message."""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus
from typing import Generic, NamedTuple, TypeVar

from .catalog import LocalizedErrorCatalog, RawDictionary
from .cause_chain import OrderedCauseSet
from .converters.builtin import default_converters
from .converters.registry import ConverterRegistry
from .core.logging import get_logger
from .core.settings import Settings, get_settings
from .error_codes import ErrorCodeMapper, ErrorCodeRegistry
from .hierarchy import qualified_name
from .http import (
    COMMON_STATUS_ROOTS,
    BusinessError,
    CommonErrorCode,
    InternalServerError,
    exception_class_for,
)
from .locales import LocaleLike
from .schemas import ErrorPayload
from .visitors import ConverterFinderVisitor, FieldErrorDiscovererVisitor

E = TypeVar("E", bound=Enum)

_ABOUT_BLANK = "about:blank"


class ErrorDescription(NamedTuple):
    error_code: Enum
    status: HTTPStatus
    message: str | None


class ExceptionConverterService(Generic[E]):
    """Converts arbitrary failures into business errors and outward payloads."""

    def __init__(
        self,
        converters: ConverterRegistry,
        mapper: ErrorCodeMapper[E],
        catalog: LocalizedErrorCatalog[E] | None = None,
        *,
        fallback_error_type: type[BusinessError] = InternalServerError,
        problem_type_base_uri: str = _ABOUT_BLANK,
    ) -> None:
        self._converters = converters
        self._mapper = mapper
        self._catalog = catalog
        self._fallback_error_type = fallback_error_type
        self._problem_type_base_uri = problem_type_base_uri.rstrip("/")
        self._converter_finder = ConverterFinderVisitor(converters)
        self._field_error_discoverer = FieldErrorDiscovererVisitor()
        self._logger = get_logger(__name__).bind(component="ExceptionConverterService")

    @property
    def mapper(self) -> ErrorCodeMapper[E]:
        return self._mapper

    @property
    def catalog(self) -> LocalizedErrorCatalog[E] | None:
        return self._catalog

    def to_business_error(self, exc: BaseException) -> BusinessError:
        """Convert ``exc`` directly, else via the most specific convertible cause."""

        business_error = self._converter_finder(exc)
        if business_error is None:
            business_error = OrderedCauseSet(exc).accept_until_result(self._converter_finder)

        if business_error is None:
            self._logger.warning(
                "exception_converter.no_converter", exception_type=qualified_name(type(exc))
            )
            business_error = self._fallback_error_type()
            business_error.__cause__ = exc

        return business_error

    def describe(
        self,
        exc: BaseException,
        *,
        preferred_language: LocaleLike | None = None,
        accept_language: str | None = None,
    ) -> ErrorDescription:
        """Return the ``(error code, status, message)`` triple for ``exc``."""

        return self._describe_business_error(
            self.to_business_error(exc), preferred_language, accept_language
        )

    def create_payload(
        self,
        exc: BaseException,
        *,
        request_uri: str | None = None,
        preferred_language: LocaleLike | None = None,
        accept_language: str | None = None,
    ) -> ErrorPayload:
        business_error = self.to_business_error(exc)
        description = self._describe_business_error(
            business_error, preferred_language, accept_language
        )
        field_errors = OrderedCauseSet(business_error).accept_until_result(
            self._field_error_discoverer
        )

        self._logger.debug(
            "exception_converter.converted",
            exception_type=qualified_name(type(exc)),
            error_code=description.error_code.name,
            status_code=description.status.value,
        )

        return ErrorPayload(
            type=self._problem_type(description.error_code),
            error_code=description.error_code.name,
            status=description.status.value,
            title=description.status.phrase,
            message=description.message,
            request_uri=request_uri,
            field_errors=field_errors or [],
            details=dict(business_error.details),
        )

    def _describe_business_error(
        self,
        business_error: BusinessError,
        preferred_language: LocaleLike | None,
        accept_language: str | None,
    ) -> ErrorDescription:
        error_code = self._mapper.to_error_code(business_error)
        status = self._mapper.to_status(business_error)
        message = None
        if self._catalog is not None:
            message = self._catalog.find_translation_with_locale_priority(
                error_code, preferred_language, accept_language
            )
        return ErrorDescription(error_code, status, message)

    def _problem_type(self, error_code: E) -> str:
        if self._problem_type_base_uri == _ABOUT_BLANK:
            return _ABOUT_BLANK
        return f"{self._problem_type_base_uri}/{error_code.name.lower()}"


def create_default_service(
    dictionary: RawDictionary | None = None,
    *,
    settings: Settings | None = None,
) -> ExceptionConverterService[CommonErrorCode]:
    """Wire the stock converters, error codes and an optional dictionary together."""

    settings = settings or get_settings()
    registry = ErrorCodeRegistry(CommonErrorCode, exception_class_for, COMMON_STATUS_ROOTS)
    mapper = ErrorCodeMapper(
        registry,
        default_error_code=CommonErrorCode.INTERNAL_SERVER_ERROR,
        default_status=HTTPStatus.INTERNAL_SERVER_ERROR,
    )
    converters = ConverterRegistry(default_converters(), cache_size=settings.converter_cache_size)
    catalog = None
    if dictionary is not None:
        catalog = LocalizedErrorCatalog(
            dictionary,
            settings.default_locale,
            error_code_type=CommonErrorCode,
        )
    return ExceptionConverterService(
        converters,
        mapper,
        catalog,
        problem_type_base_uri=settings.problem_type_base_uri,
    )


__all__ = [
    "ErrorDescription",
    "ExceptionConverterService",
    "create_default_service",
]
