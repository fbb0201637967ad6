from __future__ import annotations

from enum import Enum
from http import HTTPStatus

from business_errors.http import BusinessError, ConflictError, NotFoundError


class SampleCode(Enum):
    CODE_ONE = "CODE_ONE"
    CODE_TWO = "CODE_TWO"
    CODE_THREE = "CODE_THREE"


# A small business hierarchy:
#
#   BusinessError
#   +-- NotFoundError            (404 root)
#   |   +-- OrderNotFoundError
#   |       +-- ArchivedOrderNotFoundError
#   +-- ConflictError            (409 root)
#       +-- OrderLockedError


class OrderNotFoundError(NotFoundError):
    pass


class ArchivedOrderNotFoundError(OrderNotFoundError):
    pass


class OrderLockedError(ConflictError):
    pass


class ShopErrorCode(Enum):
    GENERIC = "GENERIC"
    NOT_FOUND = "NOT_FOUND"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    CONFLICT = "CONFLICT"
    ORDER_LOCKED = "ORDER_LOCKED"


SHOP_EXCEPTION_CLASSES: dict[ShopErrorCode, type[BusinessError]] = {
    ShopErrorCode.GENERIC: BusinessError,
    ShopErrorCode.NOT_FOUND: NotFoundError,
    ShopErrorCode.ORDER_NOT_FOUND: OrderNotFoundError,
    ShopErrorCode.CONFLICT: ConflictError,
    ShopErrorCode.ORDER_LOCKED: OrderLockedError,
}

SHOP_STATUS_ROOTS = (
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (ConflictError, HTTPStatus.CONFLICT),
)


def shop_exception_class(code: ShopErrorCode) -> type[BusinessError] | None:
    return SHOP_EXCEPTION_CLASSES.get(code)


__all__ = [
    "ArchivedOrderNotFoundError",
    "OrderLockedError",
    "OrderNotFoundError",
    "SHOP_EXCEPTION_CLASSES",
    "SHOP_STATUS_ROOTS",
    "SampleCode",
    "ShopErrorCode",
    "shop_exception_class",
]
