"""Ordered exception class registry where subclasses always precede superclasses.

Several registered classes may be ancestors of a failure's concrete class. The
registry keeps its entries linearized most-specific-first so that a plain
front-to-back scan finds the closest ancestor, and it refuses to be built when
an entry is masked by a broader one visited earlier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, TypeVar

from .core.errors import ConfigurationError

V = TypeVar("V")

ExceptionType = type[BaseException]


def qualified_name(cls: type) -> str:
    """Return the stable identifier of ``cls`` (module plus qualified name)."""

    return f"{cls.__module__}.{cls.__qualname__}"


def is_strict_ancestor(ancestor: type, descendant: type) -> bool:
    """Return ``True`` when ``ancestor`` is a proper superclass of ``descendant``."""

    return ancestor is not descendant and issubclass(descendant, ancestor)


def specificity_key(cls: type) -> tuple[int, str]:
    """Sort key placing every subclass before all of its superclasses.

    A subclass' MRO contains the MRO of each of its bases plus the class itself,
    so it is strictly longer than that of any ancestor. Unrelated classes fall
    back to their qualified names, which makes the order total and deterministic.
    """

    return (-len(cls.__mro__), qualified_name(cls))


def sort_most_specific_first(types: Iterable[type]) -> list[type]:
    """Return ``types`` ordered by :func:`specificity_key`."""

    return sorted(types, key=specificity_key)


@dataclass(frozen=True, slots=True)
class HierarchyEntry(Generic[V]):
    """A single ``(exception class, value)`` pair held by the registry."""

    type: ExceptionType
    value: V


class TypeHierarchyRegistry(Generic[V]):
    """Map of exception classes to values, iterated most-specific-first.

    By default each :meth:`put` inserts the entry at its position in the
    specificity order, so callers may register in any order. With
    ``keep_registration_order=True`` entries are kept exactly as supplied and
    :meth:`verify` is the only guard against masked entries.
    """

    def __init__(
        self,
        entries: Iterable[tuple[ExceptionType, V]] = (),
        *,
        name: str = "registry",
        keep_registration_order: bool = False,
    ) -> None:
        self._name = name
        self._keep_registration_order = keep_registration_order
        self._entries: list[HierarchyEntry[V]] = []
        self._index: dict[ExceptionType, V] = {}
        self._frozen = False
        for exception_type, value in entries:
            self.put(exception_type, value)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def name(self) -> str:
        return self._name

    @property
    def frozen(self) -> bool:
        return self._frozen

    def put(self, exception_type: ExceptionType, value: V) -> None:
        """Register ``value`` for ``exception_type``; duplicates are rejected."""

        if self._frozen:
            raise ConfigurationError(
                f"Registry '{self._name}' is frozen; cannot register {qualified_name(exception_type)}",
                details={"registry": self._name},
            )
        if not isinstance(exception_type, type) or not issubclass(exception_type, BaseException):
            raise ConfigurationError(
                f"Registry '{self._name}' accepts exception classes only, got {exception_type!r}",
                details={"registry": self._name},
            )
        if exception_type in self._index:
            raise ConfigurationError(
                f"Collision detected in registry '{self._name}': "
                f"[{qualified_name(exception_type)}] is already mapped to "
                f"[{self._index[exception_type]!r}], cannot map it to [{value!r}]",
                details={
                    "registry": self._name,
                    "type": qualified_name(exception_type),
                },
            )

        entry = HierarchyEntry(exception_type, value)
        if self._keep_registration_order:
            self._entries.append(entry)
        else:
            self._entries.insert(self._insertion_point(exception_type), entry)
        self._index[exception_type] = value

    def get(self, exception_type: type) -> V | None:
        """Return the value registered for exactly ``exception_type``."""

        return self._index.get(exception_type)

    def find_for_closest_ancestor(self, exception_type: type) -> HierarchyEntry[V] | None:
        """Return the first entry whose class is ``exception_type`` or one of its ancestors."""

        for entry in self._entries:
            if issubclass(exception_type, entry.type):
                return entry
        return None

    def verify(self) -> None:
        """Fail when any entry is masked by an ancestor visited before it.

        Every ordered pair is checked because the order may come from the caller
        and cannot be trusted to respect specificity.
        """

        for position, earlier in enumerate(self._entries):
            for later in self._entries[position + 1 :]:
                if is_strict_ancestor(earlier.type, later.type):
                    raise ConfigurationError(
                        f"Wrong order in registry '{self._name}': "
                        f"[{qualified_name(later.type)}] mapped to [{later.value!r}] "
                        f"is masked by earlier occurrence of its superclass "
                        f"[{qualified_name(earlier.type)}] mapped to [{earlier.value!r}]",
                        details={
                            "registry": self._name,
                            "masked_type": qualified_name(later.type),
                            "masking_type": qualified_name(earlier.type),
                        },
                    )

    def freeze(self) -> None:
        self._frozen = True

    def build(self) -> "TypeHierarchyRegistry[V]":
        """Verify the ordering, then make the registry read-only."""

        self.verify()
        self.freeze()
        return self

    def items(self) -> list[tuple[ExceptionType, V]]:
        return [(entry.type, entry.value) for entry in self._entries]

    def values(self) -> list[V]:
        return [entry.value for entry in self._entries]

    def __iter__(self) -> Iterator[ExceptionType]:
        return iter([entry.type for entry in self._entries])

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, exception_type: object) -> bool:
        return exception_type in self._index

    def __repr__(self) -> str:
        types = ", ".join(qualified_name(entry.type) for entry in self._entries)
        return f"TypeHierarchyRegistry(name={self._name!r}, types=[{types}])"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _insertion_point(self, exception_type: ExceptionType) -> int:
        key = specificity_key(exception_type)
        for position, entry in enumerate(self._entries):
            if key < specificity_key(entry.type):
                return position
        return len(self._entries)


__all__ = [
    "ExceptionType",
    "HierarchyEntry",
    "TypeHierarchyRegistry",
    "is_strict_ancestor",
    "qualified_name",
    "sort_most_specific_first",
    "specificity_key",
]
