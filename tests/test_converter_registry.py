from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import BaseModel, ValidationError

from business_errors.converters import (
    ConverterRegistry,
    ExceptionConverter,
    FunctionConverter,
    converter,
)
from business_errors.converters.builtin import (
    PydanticValidationErrorConverter,
    default_converters,
)
from business_errors.core.errors import ConfigurationError
from business_errors.http import (
    BadRequestError,
    BusinessError,
    ConflictError,
    NotFoundError,
    NotImplementedFeatureError,
    ServiceTimeoutError,
    UnauthorizedError,
)

from .fixtures import OrderNotFoundError


class _Customer(BaseModel):
    email: str


class _Order(BaseModel):
    quantity: int
    customer: _Customer


class _CodedError(Exception):
    def __init__(self, code: int, reason: str) -> None:
        super().__init__(f"{code}: {reason}")
        self.code = code


def _validation_error() -> ValidationError:
    try:
        _Order.model_validate({"quantity": "many", "customer": {}})
    except ValidationError as exc:
        return exc
    raise AssertionError("validation unexpectedly succeeded")


def _same_named_error(base: type[Exception]) -> type[Exception]:
    class Err(base):
        pass

    return Err


def _lookup_converters() -> list[ExceptionConverter]:
    return [
        ExceptionConverter(LookupError, NotFoundError),
        ExceptionConverter(KeyError, ConflictError),
    ]


def test_find_converter_returns_most_specific_match() -> None:
    registry = ConverterRegistry(_lookup_converters())

    assert registry.find_converter(KeyError("sku")).target_type is ConflictError
    assert registry.find_converter(IndexError("row")).target_type is NotFoundError
    assert registry.find_converter(ValueError("nope")) is None


def test_converters_are_kept_most_specific_first() -> None:
    registry = ConverterRegistry(_lookup_converters())

    assert list(registry.converters) == [KeyError, LookupError]
    assert registry.converters.frozen


def test_convert_chains_the_original_failure() -> None:
    registry = ConverterRegistry(_lookup_converters())
    cause = IndexError("row 7")

    converted = registry.convert(cause)

    assert isinstance(converted, NotFoundError)
    assert converted.message == "Not found"
    assert converted.__cause__ is cause
    assert registry.convert(ValueError("nope")) is None


def test_duplicate_source_type_is_rejected() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        ConverterRegistry(
            [
                ExceptionConverter(KeyError, NotFoundError),
                ExceptionConverter(KeyError, ConflictError),
            ]
        )

    assert "Collision" in str(excinfo.value)
    assert excinfo.value.details["source_type"] == "builtins.KeyError"


def test_converter_without_source_type_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        ConverterRegistry([ExceptionConverter(target_type=NotFoundError)])


def test_self_test_rejects_converter_raising_on_its_own_source_type() -> None:
    @converter(KeyError, NotFoundError)
    def broken(cause: KeyError) -> NotFoundError:
        raise RuntimeError("converter bug")

    with pytest.raises(ConfigurationError) as excinfo:
        ConverterRegistry([broken])

    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_self_test_rejects_type_error_for_constructible_source() -> None:
    @converter(KeyError, NotFoundError)
    def broken(cause: KeyError) -> NotFoundError:
        raise TypeError("converter bug")

    with pytest.raises(ConfigurationError):
        ConverterRegistry([broken])


def test_self_test_accepts_sources_without_message_constructor() -> None:
    @converter(_CodedError, BadRequestError)
    def coded(cause: _CodedError) -> BadRequestError:
        return BadRequestError(f"rejected with code {cause.code}")

    registry = ConverterRegistry([coded])
    converted = registry.convert(_CodedError(42, "bad"))

    assert converted.message == "rejected with code 42"


def test_self_test_accepts_pydantic_validation_converter() -> None:
    registry = ConverterRegistry([PydanticValidationErrorConverter()])

    assert ValidationError in registry.converters


def test_function_converter_type_checks_its_argument() -> None:
    item = FunctionConverter(lambda cause: NotFoundError(), KeyError, NotFoundError)

    with pytest.raises(TypeError):
        item(ValueError("wrong"))


def test_lookups_are_cached_including_misses(captured_logs) -> None:
    registry = ConverterRegistry(_lookup_converters(), cache_size=8)

    first = registry.find_converter(KeyError("a"))
    second = registry.find_converter(KeyError("b"))
    assert first is second
    assert registry.find_converter(ValueError("x")) is None
    assert registry.find_converter(ValueError("y")) is None

    misses = [entry for entry in captured_logs if entry["event"] == "converter_registry.cache_miss"]
    assert len(misses) == 2
    assert len(registry.cache) == 2


def test_cache_evicts_least_recently_used_entries() -> None:
    registry = ConverterRegistry(_lookup_converters(), cache_size=1)

    registry.find_converter(KeyError("a"))
    registry.find_converter(IndexError("b"))

    assert len(registry.cache) == 1
    registry.cache.clear()
    assert len(registry.cache) == 0


def test_registry_logs_its_converters_once_built(captured_logs) -> None:
    ConverterRegistry(_lookup_converters())

    built = [entry for entry in captured_logs if entry["event"] == "converter_registry.built"]
    assert len(built) == 1
    assert built[0]["log_level"] == "info"
    assert set(built[0]["converters"]) == {"builtins.KeyError", "builtins.LookupError"}


def test_default_converters_cover_stock_failures() -> None:
    registry = ConverterRegistry(default_converters())
    business_error = OrderNotFoundError("order 7")

    assert registry.convert(business_error) is business_error
    assert isinstance(registry.convert(TimeoutError()), ServiceTimeoutError)
    assert isinstance(registry.convert(ConnectionRefusedError()), ServiceTimeoutError)
    assert isinstance(registry.convert(PermissionError()), UnauthorizedError)
    assert isinstance(registry.convert(NotImplementedError()), NotImplementedFeatureError)
    assert registry.convert(ValueError("unmapped")) is None


def test_pydantic_validation_becomes_bad_request_with_field_errors() -> None:
    registry = ConverterRegistry(default_converters())
    cause = _validation_error()

    converted = registry.convert(cause)

    assert isinstance(converted, BadRequestError)
    assert isinstance(converted, BusinessError)
    assert converted.message == "Invalid request"
    assert converted.__cause__ is cause
    assert {error.field_name for error in converted.field_errors} == {"quantity", "email"}


def test_cache_distinguishes_classes_sharing_a_qualified_name() -> None:
    value_err = _same_named_error(ValueError)
    key_err = _same_named_error(KeyError)
    assert value_err.__qualname__ == key_err.__qualname__
    registry = ConverterRegistry(
        [ExceptionConverter(ValueError, BadRequestError), ExceptionConverter(KeyError, NotFoundError)]
    )

    assert registry.find_converter(value_err("x")).source_type is ValueError
    assert registry.find_converter(key_err("y")).source_type is KeyError
    assert isinstance(registry.convert(key_err("y")), NotFoundError)
    assert len(registry.cache) == 2


def test_concurrent_cache_population_returns_one_answer_per_class() -> None:
    registry = ConverterRegistry(_lookup_converters(), cache_size=16)
    failures = [KeyError, IndexError, LookupError, ValueError] * 50

    def lookup(exception_type: type[Exception]) -> tuple[type[Exception], ExceptionConverter | None]:
        return exception_type, registry.find_converter(exception_type("concurrent"))

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lookup, failures))

    answers: dict[type[Exception], set[int]] = {}
    for exception_type, found in results:
        answers.setdefault(exception_type, set()).add(id(found))

    assert all(len(ids) == 1 for ids in answers.values())
    assert registry.find_converter(KeyError()).target_type is ConflictError
    assert registry.find_converter(IndexError()).target_type is NotFoundError
    assert registry.find_converter(ValueError()) is None
    assert len(registry.cache) == 4
