"""Core utilities shared by the registries and the catalog."""

from .settings import Settings, get_settings
from .logging import configure_logging, get_logger
from .errors import (
    ApplicationError,
    ConfigurationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "ApplicationError",
    "ConfigurationError",
]
