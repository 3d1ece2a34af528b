"""Discriminated result type returned by the auth and project flows.

Expected business failures are values, not exceptions. The HTTP edge turns
``FailureReason`` into a status code; anything raised is a genuine fault.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureReason(StrEnum):
    MISSING_CODE = "missing_code"
    EXCHANGE_ERROR = "exchange_error"
    VALIDATION_ERROR = "validation_error"
    USER_NOT_FOUND = "user_not_found"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass
class ServiceResult(Generic[T]):
    data: T | None = None
    reason: FailureReason | None = None
    message: str = ""
    details: list[str] = field(default_factory=list)
    store_connected: bool = True

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, data: T, store_connected: bool = True) -> "ServiceResult[T]":
        return cls(data=data, store_connected=store_connected)

    @classmethod
    def failure(
        cls,
        reason: FailureReason,
        message: str,
        details: list[str] | None = None,
        store_connected: bool = True,
    ) -> "ServiceResult[T]":
        return cls(
            reason=reason,
            message=message,
            details=list(details or []),
            store_connected=store_connected,
        )
