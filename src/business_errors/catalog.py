"""Immutable, sanitized and versioned dictionary of localized error messages."""

from __future__ import annotations

import base64
import hashlib
import json
from enum import Enum
from types import MappingProxyType
from typing import Callable, Generic, Iterable, Mapping, Sequence, TypeVar

from .core.errors import ConfigurationError
from .core.logging import get_logger
from .hierarchy import qualified_name
from .locales import Locale, LocaleLike, resolve_locale_priority, sort_locales, to_locale
from .schemas import DictionarySnapshot

E = TypeVar("E", bound=Enum)

RawDictionary = Mapping[E | None, Mapping[LocaleLike | None, str | None] | None]
LocalePriorityResolver = Callable[[Sequence[Locale], LocaleLike | None, str | None], list[Locale]]


def _is_blank(message: str | None) -> bool:
    return message is None or not message.strip()


def compute_dictionary_version(dictionary: Mapping[Enum, Mapping[Locale, str]]) -> str:
    """Fingerprint of the dictionary content, independent of insertion order.

    Codes are sorted by name and locales by tag before hashing; the result is
    the URL-safe base64 SHA-256 digest of the canonical JSON document.
    """

    canonical = [
        [
            code.name,
            [[locale.tag, message] for locale, message in sorted(messages.items(), key=lambda item: item[0].tag)],
        ]
        for code, messages in sorted(dictionary.items(), key=lambda item: item[0].name)
    ]
    document = json.dumps(canonical, ensure_ascii=False, separators=(",", ":"))
    digest = hashlib.sha256(document.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class LocalizedErrorCatalog(Generic[E]):
    """Translations of business error codes, built once and read-only afterwards.

    Construction drops malformed entries (logging each one), sorts the
    dictionary by error code name, derives the supported locales and the
    dictionary version, and reports error codes that lack any translation.
    """

    def __init__(
        self,
        dictionary: RawDictionary | None,
        default_locale: LocaleLike | None,
        *,
        error_code_type: type[E] | None = None,
        locale_priority_resolver: LocalePriorityResolver | None = None,
    ) -> None:
        self._logger = get_logger(__name__).bind(component="LocalizedErrorCatalog")

        locale = to_locale(default_locale)
        if locale is None or not locale.language:
            raise ConfigurationError(
                f"Missing or invalid default locale [{default_locale!r}]",
                details={"default_locale": str(default_locale)},
            )
        if dictionary is None:
            raise ConfigurationError("Missing error dictionary")

        self._default_locale = locale
        self._locale_priority_resolver = locale_priority_resolver or resolve_locale_priority
        self._dictionary = self._sanitize(dictionary)
        self._supported_locales = tuple(
            sort_locales(locale for messages in self._dictionary.values() for locale in messages)
        )
        self._version = compute_dictionary_version(self._dictionary)
        self._error_code_type = error_code_type or self._infer_error_code_type()
        self._missing_error_codes = self._find_missing_error_codes()
        self._report_completeness()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def dictionary(self) -> Mapping[E, Mapping[Locale, str]]:
        return self._dictionary

    @property
    def version(self) -> str:
        return self._version

    @property
    def default_locale(self) -> Locale:
        return self._default_locale

    @property
    def supported_locales(self) -> tuple[Locale, ...]:
        return self._supported_locales

    @property
    def missing_error_codes(self) -> tuple[E, ...]:
        return self._missing_error_codes

    @property
    def error_code_type(self) -> type[E] | None:
        return self._error_code_type

    def find_translation(
        self,
        error_code: E,
        locales: LocaleLike | Iterable[LocaleLike | None] | None = None,
    ) -> str | None:
        """First translation among ``locales`` (one locale or several), falling back to the default locale."""

        if error_code is None:
            raise ValueError("error code must not be None")

        messages = self._dictionary.get(error_code)
        if not messages:
            return None

        if isinstance(locales, (str, Locale)):
            locales = [locales]
        for candidate in locales or ():
            if candidate is None:
                continue
            message = messages.get(to_locale(candidate))
            if not _is_blank(message):
                return message

        message = messages.get(self._default_locale)
        return None if _is_blank(message) else message

    def resolve_locale_priority(
        self,
        preferred_language: LocaleLike | None = None,
        accept_language: str | None = None,
    ) -> list[Locale]:
        """Candidate locales from the user's preference and the request header."""

        return self._locale_priority_resolver(self._supported_locales, preferred_language, accept_language)

    def find_translation_with_locale_priority(
        self,
        error_code: E,
        preferred_language: LocaleLike | None = None,
        accept_language: str | None = None,
    ) -> str | None:
        locales = self.resolve_locale_priority(preferred_language, accept_language)
        return self.find_translation(error_code, locales)

    def snapshot(self) -> DictionarySnapshot:
        return DictionarySnapshot(
            version=self._version,
            default_locale=self._default_locale.tag,
            supported_locales=[locale.tag for locale in self._supported_locales],
            entries={
                code.name: {locale.tag: message for locale, message in messages.items()}
                for code, messages in self._dictionary.items()
            },
            missing_error_codes=[code.name for code in self._missing_error_codes],
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _sanitize(self, dictionary: RawDictionary) -> Mapping[E, Mapping[Locale, str]]:
        sanitized: dict[E, Mapping[Locale, str]] = {}

        for error_code, raw_messages in dictionary.items():
            if error_code is None:
                self._logger.warning("catalog.entry_dropped", reason="missing error code")
                continue
            if not raw_messages:
                self._logger.warning(
                    "catalog.entry_dropped", reason="no translations", error_code=error_code.name
                )
                continue

            messages: dict[Locale, str] = {}
            for raw_locale, message in raw_messages.items():
                locale = to_locale(raw_locale)
                # malformed tags parse to an empty language
                if locale is None or not locale.language:
                    self._logger.warning(
                        "catalog.entry_dropped",
                        reason="invalid locale",
                        error_code=error_code.name,
                        locale=str(raw_locale),
                    )
                    continue
                if _is_blank(message):
                    self._logger.warning(
                        "catalog.entry_dropped",
                        reason="blank message",
                        error_code=error_code.name,
                        locale=locale.tag,
                    )
                    continue
                if locale in messages:
                    self._logger.warning(
                        "catalog.duplicate_locale", error_code=error_code.name, locale=locale.tag
                    )
                messages[locale] = message

            sanitized[error_code] = MappingProxyType(messages)

        ordered = dict(sorted(sanitized.items(), key=lambda item: item[0].name))
        return MappingProxyType(ordered)

    def _infer_error_code_type(self) -> type[E] | None:
        for error_code in self._dictionary:
            return type(error_code)
        return None

    def _find_missing_error_codes(self) -> tuple[E, ...]:
        if self._error_code_type is None:
            return ()
        missing = [code for code in self._error_code_type if not self._dictionary.get(code)]
        return tuple(sorted(missing, key=lambda code: code.name))

    def _report_completeness(self) -> None:
        if self._error_code_type is None:
            self._logger.warning("catalog.empty", version=self._version)
            return

        total = len(self._error_code_type)
        type_name = qualified_name(self._error_code_type)
        if not self._missing_error_codes:
            self._logger.info(
                "catalog.complete",
                version=self._version,
                error_codes=total,
                error_code_type=type_name,
            )
            return

        # incomplete translations do not block startup
        self._logger.error(
            "catalog.incomplete",
            version=self._version,
            present=total - len(self._missing_error_codes),
            total=total,
            error_code_type=type_name,
            missing=", ".join(code.name for code in self._missing_error_codes),
        )


__all__ = ["LocalizedErrorCatalog", "compute_dictionary_version"]
