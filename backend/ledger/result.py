"""Tagged result returned by the movement engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_TYPE = "InvalidType"
    INVALID_QUANTITY = "InvalidQuantity"
    MISSING_LOCATION = "MissingLocation"
    INVALID_LOCATION = "InvalidLocation"
    LOCATION_NOT_FOUND = "LocationNotFound"
    PRODUCT_NOT_FOUND = "ProductNotFound"
    INSUFFICIENT_STOCK = "InsufficientStock"
    STORAGE_UNAVAILABLE = "StorageUnavailable"

    @property
    def is_transient(self) -> bool:
        # Only storage failures are safe to retry; the rest are caller or business-rule errors.
        return self is ErrorKind.STORAGE_UNAVAILABLE


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
