"""Mappings between error codes, business exception classes and HTTP statuses."""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus
from types import MappingProxyType
from typing import Callable, Generic, Iterable, Mapping, TypeVar

from .core.errors import ConfigurationError
from .core.logging import get_logger
from .hierarchy import ExceptionType, TypeHierarchyRegistry, qualified_name

E = TypeVar("E", bound=Enum)

ExceptionClassResolver = Callable[[E], ExceptionType | None]
StatusRoot = tuple[ExceptionType, HTTPStatus | int]


def _coerce_status(value: HTTPStatus | int) -> HTTPStatus:
    try:
        return HTTPStatus(value)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown HTTP status [{value!r}]") from exc


class ErrorCodeRegistry(Generic[E]):
    """Registers every member of an error code enum against its exception class.

    Status roots are supplied as an explicit side table of
    ``(exception class, status)`` pairs. Only the exact class an error code
    resolves to is looked up in that table; subclasses inherit the status
    through closest-ancestor lookups at runtime.
    """

    def __init__(
        self,
        error_code_type: type[E],
        resolve_exception_class: ExceptionClassResolver[E],
        status_roots: Iterable[StatusRoot] = (),
    ) -> None:
        self._error_code_type = error_code_type
        self._resolve_exception_class = resolve_exception_class
        self._logger = get_logger(__name__).bind(component="ErrorCodeRegistry")

        self._status_roots = self._index_status_roots(status_roots)
        self._exception_class_to_error_code: TypeHierarchyRegistry[E] = TypeHierarchyRegistry(
            name="exception-class-to-error-code"
        )
        self._exception_class_to_status: TypeHierarchyRegistry[HTTPStatus] = TypeHierarchyRegistry(
            name="exception-class-to-status"
        )
        self._error_code_to_exception_class: dict[E, ExceptionType] = {}
        self._status_to_error_code: dict[HTTPStatus, E] = {}

        for error_code in error_code_type:
            self._register_error_code(error_code)

        if not self._error_code_to_exception_class:
            self._logger.warning(
                "error_code_registry.empty",
                error_code_type=qualified_name(error_code_type),
            )

        self._exception_class_to_error_code.build()
        self._exception_class_to_status.build()
        self._logger.debug(
            "error_code_registry.built",
            error_code_type=qualified_name(error_code_type),
            error_codes=len(self._error_code_to_exception_class),
            status_roots=len(self._status_to_error_code),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def error_code_type(self) -> type[E]:
        return self._error_code_type

    @property
    def exception_class_to_error_code(self) -> TypeHierarchyRegistry[E]:
        return self._exception_class_to_error_code

    @property
    def exception_class_to_status(self) -> TypeHierarchyRegistry[HTTPStatus]:
        return self._exception_class_to_status

    @property
    def error_code_to_exception_class(self) -> Mapping[E, ExceptionType]:
        return MappingProxyType(self._error_code_to_exception_class)

    @property
    def status_to_error_code(self) -> Mapping[HTTPStatus, E]:
        return MappingProxyType(self._status_to_error_code)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _index_status_roots(status_roots: Iterable[StatusRoot]) -> dict[ExceptionType, HTTPStatus]:
        by_type: dict[ExceptionType, HTTPStatus] = {}
        by_status: dict[HTTPStatus, ExceptionType] = {}

        for exception_type, raw_status in status_roots:
            status = _coerce_status(raw_status)
            claimed_by = by_status.get(status)
            if claimed_by is not None and claimed_by is not exception_type:
                raise ConfigurationError(
                    f"Multiple exception classes declared as roots for HTTP status [{status.value}]: "
                    f"[{qualified_name(claimed_by)}] and [{qualified_name(exception_type)}]",
                    details={"status": status.value},
                )
            declared = by_type.get(exception_type)
            if declared is not None and declared is not status:
                raise ConfigurationError(
                    f"Exception class [{qualified_name(exception_type)}] declared as root for "
                    f"HTTP statuses [{declared.value}] and [{status.value}]",
                    details={"type": qualified_name(exception_type)},
                )
            by_status[status] = exception_type
            by_type[exception_type] = status

        return by_type

    def _register_error_code(self, error_code: E) -> None:
        exception_class = self._resolve_exception_class(error_code)
        if exception_class is None:
            raise ConfigurationError(
                f"Error code [{error_code.name}] resolves to no exception class",
                details={"error_code": error_code.name},
            )

        conflicting = self._exception_class_to_error_code.get(exception_class)
        if conflicting is not None:
            raise ConfigurationError(
                f"Multiple error codes [{error_code.name}, {conflicting.name}] refer to "
                f"the same exception class [{qualified_name(exception_class)}]",
                details={
                    "error_codes": [error_code.name, conflicting.name],
                    "type": qualified_name(exception_class),
                },
            )

        self._exception_class_to_error_code.put(exception_class, error_code)
        self._error_code_to_exception_class[error_code] = exception_class
        self._register_status_root(error_code, exception_class)

    def _register_status_root(self, error_code: E, exception_class: ExceptionType) -> None:
        status = self._status_roots.get(exception_class)
        if status is None:
            return

        for registered_class, registered_status in self._exception_class_to_status.items():
            if registered_status is status and registered_class is not exception_class:
                raise ConfigurationError(
                    f"Multiple exception classes declared as roots for HTTP status [{status.value}]: "
                    f"[{qualified_name(registered_class)}] and [{qualified_name(exception_class)}]",
                    details={"status": status.value},
                )

        self._exception_class_to_status.put(exception_class, status)
        self._status_to_error_code[status] = error_code


class ErrorCodeMapper(Generic[E]):
    """Resolves exceptions and statuses to error codes, falling back to declared defaults."""

    def __init__(
        self,
        registry: ErrorCodeRegistry[E],
        *,
        default_error_code: E | None,
        default_status: HTTPStatus | int | None,
    ) -> None:
        if default_error_code is None:
            raise ConfigurationError("Missing default error code")
        if default_status is None:
            raise ConfigurationError("Missing default HTTP status")
        self._registry = registry
        self._default_error_code = default_error_code
        self._default_status = _coerce_status(default_status)

    @property
    def registry(self) -> ErrorCodeRegistry[E]:
        return self._registry

    @property
    def default_error_code(self) -> E:
        return self._default_error_code

    @property
    def default_status(self) -> HTTPStatus:
        return self._default_status

    def to_error_code(self, exc: BaseException | None) -> E:
        """Error code of the closest registered ancestor of ``exc``'s class."""

        if exc is None:
            return self._default_error_code
        entry = self._registry.exception_class_to_error_code.find_for_closest_ancestor(type(exc))
        return entry.value if entry is not None else self._default_error_code

    def to_error_code_for_status(self, status: HTTPStatus | int | None) -> E:
        """Error code whose exception class is the declared root for ``status``."""

        if status is None:
            return self._default_error_code
        try:
            resolved = HTTPStatus(status)
        except ValueError:
            return self._default_error_code
        return self._registry.status_to_error_code.get(resolved, self._default_error_code)

    def to_status(self, exc: BaseException | None) -> HTTPStatus:
        """Status declared by the closest status root above ``exc``'s class."""

        if exc is None:
            return self._default_status
        return self._status_for_class(type(exc))

    def to_status_for_error_code(self, error_code: E | None) -> HTTPStatus:
        """Status declared by the closest status root above the code's exception class."""

        if error_code is None:
            return self._default_status
        exception_class = self._registry.error_code_to_exception_class.get(error_code)
        if exception_class is None:
            return self._default_status
        return self._status_for_class(exception_class)

    def _status_for_class(self, exception_class: type) -> HTTPStatus:
        entry = self._registry.exception_class_to_status.find_for_closest_ancestor(exception_class)
        return entry.value if entry is not None else self._default_status


__all__ = ["ErrorCodeMapper", "ErrorCodeRegistry", "StatusRoot"]
