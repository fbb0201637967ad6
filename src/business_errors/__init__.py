"""Classify runtime failures into business error codes, statuses and localized messages."""

from .catalog import LocalizedErrorCatalog, compute_dictionary_version
from .cause_chain import OrderedCauseSet, iter_cause_chain
from .converters import ConverterRegistry, ExceptionConverter, converter
from .core import ApplicationError, ConfigurationError, Settings, get_settings
from .error_codes import ErrorCodeMapper, ErrorCodeRegistry
from .hierarchy import TypeHierarchyRegistry
from .locales import Locale
from .service import ErrorDescription, ExceptionConverterService, create_default_service

__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "ConverterRegistry",
    "ErrorCodeMapper",
    "ErrorCodeRegistry",
    "ErrorDescription",
    "ExceptionConverter",
    "ExceptionConverterService",
    "Locale",
    "LocalizedErrorCatalog",
    "OrderedCauseSet",
    "Settings",
    "TypeHierarchyRegistry",
    "compute_dictionary_version",
    "converter",
    "create_default_service",
    "get_settings",
    "iter_cause_chain",
]
