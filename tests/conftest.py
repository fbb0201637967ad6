from __future__ import annotations

from http import HTTPStatus

import pytest
from structlog.testing import capture_logs

from business_errors.core.logging import configure_logging
from business_errors.error_codes import ErrorCodeMapper, ErrorCodeRegistry

from .fixtures import SHOP_STATUS_ROOTS, ShopErrorCode, shop_exception_class

# configure once up front so capture_logs is never overridden mid-test
configure_logging("DEBUG")


@pytest.fixture()
def captured_logs():
    with capture_logs() as entries:
        yield entries


@pytest.fixture()
def shop_registry() -> ErrorCodeRegistry[ShopErrorCode]:
    return ErrorCodeRegistry(ShopErrorCode, shop_exception_class, SHOP_STATUS_ROOTS)


@pytest.fixture()
def shop_mapper(shop_registry) -> ErrorCodeMapper[ShopErrorCode]:
    return ErrorCodeMapper(
        shop_registry,
        default_error_code=ShopErrorCode.GENERIC,
        default_status=HTTPStatus.INTERNAL_SERVER_ERROR,
    )
