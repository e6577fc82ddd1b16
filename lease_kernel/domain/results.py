"""
Tagged operation results.

Every public kernel operation returns a ``LeaseResult``: either a success
carrying a value, or a failure carrying the machine-readable code of the
first violated rule.  Domain errors never unwind across the service
boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from lease_kernel.exceptions import LeaseKernelError

T = TypeVar("T")


@dataclass(frozen=True)
class LeaseResult(Generic[T]):
    """
    Result of a kernel operation.

    Contract:
        ``ok`` is True iff ``error_code`` is None.  On failure ``value`` is
        None and ``error_code``/``error_number``/``message`` describe the
        rule that rejected the call.
    """

    ok: bool
    value: T | None = None
    error_code: str | None = None
    error_number: int | None = None
    message: str | None = None

    @classmethod
    def success(cls, value: T) -> "LeaseResult[T]":
        """Create a successful result."""
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: LeaseKernelError) -> "LeaseResult[T]":
        """Create a failure result from a typed kernel error."""
        return cls(
            ok=False,
            error_code=error.code,
            error_number=error.error_number,
            message=str(error),
        )

    @property
    def is_success(self) -> bool:
        return self.ok

    def __bool__(self) -> bool:
        return self.ok
