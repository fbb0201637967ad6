"""Pydantic models handed to the serialization layer."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FieldErrorPayload(BaseModel):
    """Validation failure attached to a single request field."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field_name: str = Field(alias="fieldName")
    error_code: str = Field(alias="errorCode")
    error_message: str | None = Field(default=None, alias="errorMessage")


class ErrorPayload(BaseModel):
    """Outward representation of a failure classified into a business error code."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(default="about:blank")
    error_code: str = Field(alias="errorCode")
    status: int
    title: str
    message: str | None = None
    request_uri: str | None = Field(default=None, alias="requestUri")
    field_errors: list[FieldErrorPayload] = Field(default_factory=list, alias="fieldErrors")
    details: dict[str, Any] = Field(default_factory=dict)


class DictionarySnapshot(BaseModel):
    """Full localized dictionary plus the metadata clients need for caching."""

    model_config = ConfigDict(frozen=True)

    version: str
    default_locale: str
    supported_locales: list[str]
    entries: dict[str, dict[str, str]]
    missing_error_codes: list[str]


__all__ = ["DictionarySnapshot", "ErrorPayload", "FieldErrorPayload"]
