"""
Explicit success/failure channel for operations that talk to the stores.

Lenient callers read ``.value`` (which holds the fallback on failure) and
treat a failure exactly like "no data yet". Strict callers call
``unwrap()`` and get the original exception back.
"""
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class OperationResult(Generic[T]):
    """Outcome of a store operation: a value, or an error plus a fallback value"""

    __slots__ = ("value", "error")

    def __init__(self, value: T, error: Optional[BaseException] = None):
        self.value = value
        self.error = error

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(value)

    @classmethod
    def failure(cls, error: BaseException, fallback: T) -> "OperationResult[T]":
        return cls(fallback, error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default

    def __repr__(self) -> str:
        if self.ok:
            return f"OperationResult.success({self.value!r})"
        return f"OperationResult.failure({self.error!r})"
