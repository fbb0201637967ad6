"""Base class for converters turning arbitrary failures into business exceptions."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from ..hierarchy import qualified_name
from ..http import BusinessError

S = TypeVar("S", bound=BaseException)
T = TypeVar("T", bound=BusinessError)


class ExceptionConverter(Generic[S, T]):
    """Converts one source exception class into one business exception class.

    Subclasses declare ``source_type`` and ``target_type`` as class attributes
    (or pass them to the constructor) and may override :meth:`convert`. The
    default conversion instantiates ``target_type`` with its default message and
    chains the original failure as its cause.
    """

    source_type: type[BaseException]
    target_type: type[BusinessError]

    def __init__(
        self,
        source_type: type[S] | None = None,
        target_type: type[T] | None = None,
    ) -> None:
        if source_type is not None:
            self.source_type = source_type
        if target_type is not None:
            self.target_type = target_type

    def __call__(self, cause: BaseException) -> T:
        """Convert ``cause`` after checking it is an instance of ``source_type``."""

        if not isinstance(cause, self.source_type):
            raise TypeError(
                f"{type(self).__name__} converts [{qualified_name(self.source_type)}], "
                f"got [{qualified_name(type(cause))}]"
            )
        return self.convert(cause)  # type: ignore[arg-type]

    def convert(self, cause: S) -> T:
        business_error = self.target_type()
        business_error.__cause__ = cause
        return business_error  # type: ignore[return-value]

    def __repr__(self) -> str:
        source = getattr(self, "source_type", None)
        target = getattr(self, "target_type", None)
        return (
            f"{type(self).__name__}("
            f"{qualified_name(source) if source else None} -> "
            f"{qualified_name(target) if target else None})"
        )


class FunctionConverter(ExceptionConverter[S, T]):
    """Adapts a plain function into an :class:`ExceptionConverter`."""

    def __init__(
        self,
        function: Callable[[S], T],
        source_type: type[S],
        target_type: type[T],
    ) -> None:
        super().__init__(source_type, target_type)
        self._function = function
        self.__name__ = getattr(function, "__name__", type(self).__name__)

    def convert(self, cause: S) -> T:
        return self._function(cause)

    def __repr__(self) -> str:
        return (
            f"FunctionConverter({self.__name__}: {qualified_name(self.source_type)} -> "
            f"{qualified_name(self.target_type)})"
        )


def converter(
    source_type: type[S], target_type: type[T]
) -> Callable[[Callable[[S], T]], FunctionConverter[S, T]]:
    """Decorator declaring a function as the converter for ``source_type``."""

    def decorator(function: Callable[[S], T]) -> FunctionConverter[S, T]:
        return FunctionConverter(function, source_type, target_type)

    return decorator


__all__ = ["ExceptionConverter", "FunctionConverter", "converter"]
