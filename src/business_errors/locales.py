"""Locale values, language tag parsing and locale priority resolution."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

_LANGUAGE_RE = re.compile(r"^[A-Za-z]{2,3}$")
_REGION_RE = re.compile(r"^(?:[A-Za-z]{2}|[0-9]{3})$")
_QUALITY_RE = re.compile(r"^q=([01](?:\.[0-9]{0,3})?)$", re.IGNORECASE)


@dataclass(frozen=True, order=True, slots=True)
class Locale:
    """Language plus optional region, ordered by ``(language, region)``.

    Malformed tags parse to an empty language instead of raising; such locales
    are what catalog sanitization drops.
    """

    language: str
    region: str = ""

    @classmethod
    def parse(cls, tag: str | None) -> "Locale":
        if not tag:
            return cls("")
        parts = tag.strip().replace("_", "-").split("-")
        language = parts[0]
        if not _LANGUAGE_RE.match(language):
            return cls("")
        region = ""
        if len(parts) > 1:
            if len(parts) > 2 or not _REGION_RE.match(parts[1]):
                return cls("")
            region = parts[1].upper()
        return cls(language.lower(), region)

    @property
    def tag(self) -> str:
        """Canonical tag, e.g. ``en`` or ``en-US``."""

        if self.region:
            return f"{self.language}-{self.region}"
        return self.language

    def __str__(self) -> str:
        return self.tag


LocaleLike = Locale | str


def to_locale(value: LocaleLike | None) -> Locale | None:
    if value is None or isinstance(value, Locale):
        return value
    return Locale.parse(value)


def parse_accept_language(header: str | None) -> list[Locale]:
    """Locales of an ``Accept-Language`` header, highest quality first.

    Wildcards, ``q=0`` entries and malformed tags are skipped; ties keep their
    header order.
    """

    if not header:
        return []

    weighted: list[tuple[float, int, Locale]] = []
    for position, item in enumerate(header.split(",")):
        tag, *params = (part.strip() for part in item.split(";"))
        if not tag or tag == "*":
            continue
        quality = 1.0
        for param in params:
            match = _QUALITY_RE.match(param)
            if match:
                quality = float(match.group(1))
        locale = Locale.parse(tag)
        if quality <= 0 or not locale.language:
            continue
        weighted.append((-quality, position, locale))

    return [locale for _, _, locale in sorted(weighted)]


def _match_supported(candidate: Locale, supported: Sequence[Locale]) -> Locale | None:
    if candidate in supported:
        return candidate
    for locale in supported:
        if locale.language == candidate.language:
            return locale
    return None


def resolve_locale_priority(
    supported: Sequence[Locale],
    preferred_language: LocaleLike | None = None,
    accept_language: str | None = None,
) -> list[Locale]:
    """Ordered candidate locales: user preference first, then the request header.

    Each candidate maps to an exactly matching supported locale, else to the
    first supported locale sharing its language; unmatched candidates and
    duplicates are dropped.
    """

    candidates: list[Locale] = []
    preferred = to_locale(preferred_language)
    if preferred is not None and preferred.language:
        candidates.append(preferred)
    candidates.extend(parse_accept_language(accept_language))

    resolved: list[Locale] = []
    for candidate in candidates:
        match = _match_supported(candidate, supported)
        if match is not None and match not in resolved:
            resolved.append(match)
    return resolved


def sort_locales(locales: Iterable[Locale]) -> list[Locale]:
    return sorted(set(locales))


__all__ = [
    "Locale",
    "LocaleLike",
    "parse_accept_language",
    "resolve_locale_priority",
    "sort_locales",
    "to_locale",
]
