"""Visitors applied to exceptions while walking an ordered cause chain.

Handlers are picked from an explicit, verified class table rather than by
introspecting handler signatures, so the most specific handler wins for the
same reasons the most specific converter does.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterable, TypeVar

from pydantic import ValidationError as PydanticValidationError

from .converters.registry import ConverterRegistry
from .hierarchy import ExceptionType, TypeHierarchyRegistry
from .http import BusinessError
from .schemas import FieldErrorPayload

R = TypeVar("R")

_UNKNOWN_FIELD = "<unknown>"


def mask_field_name(field_name: str | None) -> str | None:
    """Strip the ``outer.nested.`` prefix so clients see only the failing field."""

    if field_name is None:
        return None
    last_dot = field_name.rfind(".")
    if last_dot == -1 or last_dot == len(field_name) - 1:
        return field_name
    return field_name[last_dot + 1 :]


def _pascal_case(value: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in value.split("_") if part)


class TypeDispatchVisitor(Generic[R]):
    """Dispatches an exception to the handler registered for its closest ancestor class."""

    def __init__(self, handlers: Iterable[tuple[ExceptionType, Callable[[Any], R | None]]] = ()) -> None:
        self._handlers: TypeHierarchyRegistry[Callable[[Any], R | None]] = TypeHierarchyRegistry(
            handlers, name=f"{type(self).__name__}-handlers"
        )

    def register(
        self, exception_type: ExceptionType
    ) -> Callable[[Callable[[Any], R | None]], Callable[[Any], R | None]]:
        """Decorator adding a handler for ``exception_type``."""

        def decorator(handler: Callable[[Any], R | None]) -> Callable[[Any], R | None]:
            self._handlers.put(exception_type, handler)
            return handler

        return decorator

    def build(self) -> "TypeDispatchVisitor[R]":
        self._handlers.build()
        return self

    @property
    def handlers(self) -> TypeHierarchyRegistry[Callable[[Any], R | None]]:
        return self._handlers

    def __call__(self, exc: BaseException) -> R | None:
        if not self._handlers.frozen:
            self.build()
        entry = self._handlers.find_for_closest_ancestor(type(exc))
        if entry is None:
            return None
        return entry.value(exc)


class ConverterFinderVisitor:
    """Finds and applies the converter registered for an exception, if any."""

    def __init__(self, registry: ConverterRegistry) -> None:
        self._registry = registry

    def __call__(self, exc: BaseException) -> BusinessError | None:
        return self._registry.convert(exc)


def pydantic_field_errors(exc: PydanticValidationError) -> list[FieldErrorPayload]:
    """Field-level errors reported by a pydantic validation failure."""

    field_errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        field_errors.append(
            FieldErrorPayload(
                field_name=mask_field_name(location) or _UNKNOWN_FIELD,
                error_code=_pascal_case(error.get("type", "")) or "Invalid",
                error_message=error.get("msg"),
            )
        )
    return field_errors


class FieldErrorDiscovererVisitor(TypeDispatchVisitor[list[FieldErrorPayload]]):
    """Extracts field errors from exception classes known to carry them.

    Returns ``None`` for unknown classes, and for business errors that carry no
    field errors so that the cause chain walk continues.
    """

    def __init__(self) -> None:
        super().__init__(
            [
                (PydanticValidationError, pydantic_field_errors),
                (BusinessError, self._business_error_fields),
            ]
        )
        self.build()

    @staticmethod
    def _business_error_fields(exc: BusinessError) -> list[FieldErrorPayload] | None:
        return list(exc.field_errors) or None


__all__ = [
    "ConverterFinderVisitor",
    "FieldErrorDiscovererVisitor",
    "TypeDispatchVisitor",
    "mask_field_name",
    "pydantic_field_errors",
]
