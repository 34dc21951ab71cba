"""
Success/failure envelope returned by service operations that must not raise.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    is_success: bool
    value: T | None = None
    error: str | None = None

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @classmethod
    def ok(cls, value: T) -> "ServiceResult[T]":
        return cls(is_success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> "ServiceResult[T]":
        return cls(is_success=False, error=error)
