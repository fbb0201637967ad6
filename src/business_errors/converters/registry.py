"""Registry resolving the converter responsible for a concrete exception class."""

from __future__ import annotations

import threading
from typing import Any, Iterable

from cachetools import LRUCache

from ..cause_chain import iter_cause_chain
from ..core.errors import ConfigurationError
from ..core.logging import get_logger
from ..hierarchy import TypeHierarchyRegistry, qualified_name
from ..http import BusinessError
from .base import ExceptionConverter

_MISSING: Any = object()
_SELF_TEST_MESSAGE = "test message"

DEFAULT_CACHE_SIZE = 1024


class ConverterCache:
    """Read-through memo of converter lookups keyed by the concrete class object.

    Lookups are computed outside the lock; two threads racing on the same key
    compute the same answer and the first stored value wins.
    """

    def __init__(self, maxsize: int = DEFAULT_CACHE_SIZE) -> None:
        self._entries: LRUCache[type, ExceptionConverter | None] = LRUCache(maxsize=maxsize)
        self._lock = threading.Lock()

    def get(self, key: type) -> Any:
        with self._lock:
            return self._entries.get(key, _MISSING)

    def store(self, key: type, value: ExceptionConverter | None) -> ExceptionConverter | None:
        with self._lock:
            return self._entries.setdefault(key, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ConverterRegistry:
    """Most-specific-first table of exception converters, verified at construction."""

    def __init__(
        self,
        converters: Iterable[ExceptionConverter],
        *,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        self._logger = get_logger(__name__).bind(component="ConverterRegistry")
        self._converters: TypeHierarchyRegistry[ExceptionConverter] = TypeHierarchyRegistry(
            name="exception-converters"
        )
        self._cache = ConverterCache(cache_size)

        for item in converters:
            self._register(item)

        self._converters.verify()
        for source_type, item in self._converters.items():
            self._self_test(source_type, item)
        self._converters.freeze()

        self._logger.info(
            "converter_registry.built",
            converters={
                qualified_name(source_type): repr(item)
                for source_type, item in self._converters.items()
            },
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def converters(self) -> TypeHierarchyRegistry[ExceptionConverter]:
        return self._converters

    @property
    def cache(self) -> ConverterCache:
        return self._cache

    def find_converter(self, exc: BaseException) -> ExceptionConverter | None:
        """Return the converter of the closest registered ancestor of ``exc``'s class."""

        exception_type = type(exc)

        # classes, not names: same-named local classes are distinct types
        cached = self._cache.get(exception_type)
        if cached is not _MISSING:
            return cached

        found = self._converters.get(exception_type)
        if found is None:
            entry = self._converters.find_for_closest_ancestor(exception_type)
            found = entry.value if entry is not None else None

        self._logger.debug(
            "converter_registry.cache_miss", exception_type=qualified_name(exception_type)
        )
        return self._cache.store(exception_type, found)

    def convert(self, exc: BaseException) -> BusinessError | None:
        """Convert ``exc`` with its converter, or return ``None`` when none applies."""

        found = self.find_converter(exc)
        if found is None:
            return None
        return found(exc)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _register(self, item: ExceptionConverter) -> None:
        source_type = getattr(item, "source_type", None)
        if source_type is None:
            raise ConfigurationError(
                f"Exception converter [{item!r}] declares no source type",
                details={"converter": repr(item)},
            )

        existing = self._converters.get(source_type)
        if existing is not None:
            raise ConfigurationError(
                f"Collision detected for exception converter [{item!r}]: its source class "
                f"[{qualified_name(source_type)}] is already converted by [{existing!r}]",
                details={
                    "source_type": qualified_name(source_type),
                    "converters": [repr(existing), repr(item)],
                },
            )

        self._converters.put(source_type, item)

    def _self_test(self, source_type: type[BaseException], item: ExceptionConverter) -> None:
        """Invoke ``item`` once so broken converters fail at boot, not at request time.

        Not every exception class has a single-message constructor. When the
        sample cannot be built a bare ``Exception`` is passed instead, and the
        converter is then expected to reject it with a ``TypeError``.
        """

        try:
            sample: BaseException = source_type(_SELF_TEST_MESSAGE)
        except Exception:
            sample = Exception()
        sample_matches = isinstance(sample, source_type)

        try:
            item(sample)
        except Exception as exc:
            if sample_matches or not _is_type_mismatch(exc):
                raise ConfigurationError(
                    f"Unexpected error from exception converter [{item!r}]",
                    details={"source_type": qualified_name(source_type)},
                ) from exc


def _is_type_mismatch(exc: BaseException) -> bool:
    return any(isinstance(cause, TypeError) for cause in iter_cause_chain(exc))


__all__ = ["ConverterCache", "ConverterRegistry", "DEFAULT_CACHE_SIZE"]
