"""Library settings powered by :mod:`pydantic_settings`."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic.functional_validators import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized configuration for error mapping and localization."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging verbosity for registry and catalog diagnostics.",
    )
    default_locale: str = Field(
        default="en",
        alias="DEFAULT_LOCALE",
        description="Language tag used when no requested locale has a translation.",
    )
    converter_cache_size: int = Field(
        default=1024,
        alias="CONVERTER_CACHE_SIZE",
        ge=1,
        description="Maximum number of exception classes memoized by the converter registry.",
    )
    problem_type_base_uri: str = Field(
        default="about:blank",
        alias="PROBLEM_TYPE_BASE_URI",
        description="Prefix for the problem type URI rendered in error payloads.",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("default_locale")
    @classmethod
    def _require_default_locale(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("DEFAULT_LOCALE must not be blank")
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
