"""Most-specific-first traversal of an exception's cause chain.

Iteration order is NOT ``exc -> cause -> ... -> root cause``. It follows the
same specificity order as :class:`~business_errors.hierarchy.TypeHierarchyRegistry`
so callers can react to the most specific known failure anywhere in the chain.
A ``NotFoundError`` wrapped inside a bare ``Exception`` is then reported as
"not found" rather than as a generic server error.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, TypeVar, overload

from .hierarchy import specificity_key

R = TypeVar("R")
S = TypeVar("S")

_NO_STATE: Any = object()


def next_cause(exc: BaseException) -> BaseException | None:
    """Return the exception the interpreter would report as the cause of ``exc``."""

    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def iter_cause_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` followed by its causes, stopping when a cycle closes."""

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = next_cause(current)


class OrderedCauseSet(Iterator[BaseException]):
    """Distinct exception classes of a cause chain, most specific first.

    When a class occurs more than once, the occurrence closer to the root cause
    is kept. The object is its own single-pass iterator and is not thread-safe:
    build a fresh instance for every failure being handled.
    """

    def __init__(self, exc: BaseException) -> None:
        if exc is None:
            raise ValueError("exception chain must not be None")

        by_type: dict[type[BaseException], BaseException] = {}
        for cause in iter_cause_chain(exc):
            # later (closer to the root cause) wins
            by_type[type(cause)] = cause

        ordered = sorted(by_type.items(), key=lambda item: specificity_key(item[0]))
        self._types = tuple(exception_type for exception_type, _ in ordered)
        self._delegate = iter([cause for _, cause in ordered])

    @property
    def types(self) -> tuple[type[BaseException], ...]:
        """Classes in iteration order; reading them does not consume the iterator."""

        return self._types

    def __iter__(self) -> "OrderedCauseSet":
        return self

    def __next__(self) -> BaseException:
        return next(self._delegate)

    @overload
    def accept_until_result(self, visitor: Callable[[BaseException], R | None]) -> R | None: ...

    @overload
    def accept_until_result(
        self, visitor: Callable[[BaseException, S], R | None], state: S
    ) -> R | None: ...

    def accept_until_result(self, visitor, state=_NO_STATE):
        """Apply ``visitor`` to the remaining causes until it returns something other than ``None``.

        A stateful visitor receives ``state`` as its second argument; the state is
        never created here because visitors may call back into this method.
        """

        for cause in self:
            result = visitor(cause) if state is _NO_STATE else visitor(cause, state)
            if result is not None:
                return result
        return None


__all__ = ["OrderedCauseSet", "iter_cause_chain", "next_cause"]
