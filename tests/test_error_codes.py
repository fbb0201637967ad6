from __future__ import annotations

from enum import Enum
from http import HTTPStatus

import pytest

from business_errors.core.errors import ConfigurationError
from business_errors.error_codes import ErrorCodeMapper, ErrorCodeRegistry
from business_errors.http import (
    COMMON_STATUS_ROOTS,
    BusinessError,
    CommonErrorCode,
    ConflictError,
    NotFoundError,
    exception_class_for,
)

from .fixtures import (
    ArchivedOrderNotFoundError,
    OrderLockedError,
    OrderNotFoundError,
    ShopErrorCode,
)


class _AliasedCode(Enum):
    FIRST = "FIRST"
    SECOND = "SECOND"


class _UnresolvedCode(Enum):
    KNOWN = "KNOWN"
    UNKNOWN = "UNKNOWN"


class _EmptyCode(Enum):
    pass


def test_registry_indexes_every_error_code(shop_registry) -> None:
    mapping = shop_registry.error_code_to_exception_class

    assert mapping[ShopErrorCode.ORDER_NOT_FOUND] is OrderNotFoundError
    assert mapping[ShopErrorCode.GENERIC] is BusinessError
    assert len(shop_registry.exception_class_to_error_code) == len(ShopErrorCode)
    assert shop_registry.exception_class_to_error_code.frozen
    assert shop_registry.exception_class_to_status.frozen


def test_registry_only_registers_status_roots_for_exact_classes(shop_registry) -> None:
    statuses = dict(shop_registry.exception_class_to_status.items())

    assert statuses == {NotFoundError: HTTPStatus.NOT_FOUND, ConflictError: HTTPStatus.CONFLICT}
    assert dict(shop_registry.status_to_error_code) == {
        HTTPStatus.NOT_FOUND: ShopErrorCode.NOT_FOUND,
        HTTPStatus.CONFLICT: ShopErrorCode.CONFLICT,
    }


def test_registry_rejects_two_codes_for_the_same_class() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        ErrorCodeRegistry(_AliasedCode, lambda code: NotFoundError)

    message = str(excinfo.value)
    assert "FIRST" in message
    assert "SECOND" in message
    assert "NotFoundError" in message


def test_registry_rejects_codes_without_exception_class() -> None:
    resolved = {_UnresolvedCode.KNOWN: NotFoundError}

    with pytest.raises(ConfigurationError) as excinfo:
        ErrorCodeRegistry(_UnresolvedCode, resolved.get)

    assert "UNKNOWN" in str(excinfo.value)


def test_registry_rejects_two_roots_for_one_status() -> None:
    with pytest.raises(ConfigurationError):
        ErrorCodeRegistry(
            ShopErrorCode,
            lambda code: {
                ShopErrorCode.GENERIC: BusinessError,
                ShopErrorCode.NOT_FOUND: NotFoundError,
                ShopErrorCode.ORDER_NOT_FOUND: OrderNotFoundError,
                ShopErrorCode.CONFLICT: ConflictError,
                ShopErrorCode.ORDER_LOCKED: OrderLockedError,
            }[code],
            status_roots=(
                (NotFoundError, HTTPStatus.NOT_FOUND),
                (OrderNotFoundError, HTTPStatus.NOT_FOUND),
            ),
        )


def test_registry_rejects_unknown_status_values() -> None:
    with pytest.raises(ConfigurationError):
        ErrorCodeRegistry(ShopErrorCode, lambda code: None, status_roots=((NotFoundError, 999),))


def test_empty_registry_logs_a_warning(captured_logs) -> None:
    registry = ErrorCodeRegistry(_EmptyCode, lambda code: None)

    assert len(registry.error_code_to_exception_class) == 0
    assert any(
        entry["event"] == "error_code_registry.empty" and entry["log_level"] == "warning"
        for entry in captured_logs
    )


def test_mapper_resolves_closest_registered_error_code(shop_mapper) -> None:
    assert shop_mapper.to_error_code(ArchivedOrderNotFoundError()) is ShopErrorCode.ORDER_NOT_FOUND
    assert shop_mapper.to_error_code(OrderLockedError()) is ShopErrorCode.ORDER_LOCKED
    assert shop_mapper.to_error_code(NotFoundError()) is ShopErrorCode.NOT_FOUND


def test_mapper_falls_back_to_defaults(shop_mapper) -> None:
    assert shop_mapper.to_error_code(ValueError("boom")) is ShopErrorCode.GENERIC
    assert shop_mapper.to_error_code(None) is ShopErrorCode.GENERIC
    assert shop_mapper.to_status(ValueError("boom")) is HTTPStatus.INTERNAL_SERVER_ERROR
    assert shop_mapper.to_status(BusinessError()) is HTTPStatus.INTERNAL_SERVER_ERROR
    assert shop_mapper.to_status(None) is HTTPStatus.INTERNAL_SERVER_ERROR


def test_mapper_inherits_status_from_closest_root(shop_mapper) -> None:
    assert shop_mapper.to_status(ArchivedOrderNotFoundError()) is HTTPStatus.NOT_FOUND
    assert shop_mapper.to_status(OrderLockedError()) is HTTPStatus.CONFLICT
    assert shop_mapper.to_status_for_error_code(ShopErrorCode.ORDER_NOT_FOUND) is HTTPStatus.NOT_FOUND
    assert shop_mapper.to_status_for_error_code(ShopErrorCode.GENERIC) is HTTPStatus.INTERNAL_SERVER_ERROR
    assert shop_mapper.to_status_for_error_code(None) is HTTPStatus.INTERNAL_SERVER_ERROR


def test_mapper_resolves_error_code_for_status(shop_mapper) -> None:
    assert shop_mapper.to_error_code_for_status(HTTPStatus.NOT_FOUND) is ShopErrorCode.NOT_FOUND
    assert shop_mapper.to_error_code_for_status(409) is ShopErrorCode.CONFLICT
    assert shop_mapper.to_error_code_for_status(HTTPStatus.IM_A_TEAPOT) is ShopErrorCode.GENERIC
    assert shop_mapper.to_error_code_for_status(999) is ShopErrorCode.GENERIC
    assert shop_mapper.to_error_code_for_status(None) is ShopErrorCode.GENERIC


def test_mapper_requires_defaults(shop_registry) -> None:
    with pytest.raises(ConfigurationError):
        ErrorCodeMapper(shop_registry, default_error_code=None, default_status=HTTPStatus.INTERNAL_SERVER_ERROR)
    with pytest.raises(ConfigurationError):
        ErrorCodeMapper(shop_registry, default_error_code=ShopErrorCode.GENERIC, default_status=None)


def test_mapper_coerces_integer_default_status(shop_registry) -> None:
    mapper = ErrorCodeMapper(shop_registry, default_error_code=ShopErrorCode.GENERIC, default_status=500)

    assert mapper.default_status is HTTPStatus.INTERNAL_SERVER_ERROR


def test_common_error_codes_cover_every_stock_exception() -> None:
    registry = ErrorCodeRegistry(CommonErrorCode, exception_class_for, COMMON_STATUS_ROOTS)
    mapper = ErrorCodeMapper(
        registry,
        default_error_code=CommonErrorCode.INTERNAL_SERVER_ERROR,
        default_status=HTTPStatus.INTERNAL_SERVER_ERROR,
    )

    for code in CommonErrorCode:
        assert mapper.to_error_code(exception_class_for(code)()) is code
    assert mapper.to_status_for_error_code(CommonErrorCode.SERVICE_TIMEOUT) is HTTPStatus.GATEWAY_TIMEOUT
    assert mapper.to_error_code_for_status(HTTPStatus.REQUEST_ENTITY_TOO_LARGE) is CommonErrorCode.PAYLOAD_TOO_LARGE
