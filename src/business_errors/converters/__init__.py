"""Exception converters and the registry selecting among them."""

from .base import ExceptionConverter, FunctionConverter, converter
from .registry import ConverterCache, ConverterRegistry

__all__ = [
    "ConverterCache",
    "ConverterRegistry",
    "ExceptionConverter",
    "FunctionConverter",
    "converter",
]
