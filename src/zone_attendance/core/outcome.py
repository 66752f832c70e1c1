from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from .exceptions import AttendanceError

T = TypeVar("T")

TRY_AGAIN = "TRY_AGAIN"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Value-returned result of an operation.

    Failures are carried as data so adapters can render a consistent
    idle/error state instead of unwinding through exceptions.
    """

    value: Optional[T] = None
    error: Optional[AttendanceError] = None
    retryable: bool = False
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.error is None and not self.retryable

    @property
    def code(self) -> str:
        if self.retryable:
            return TRY_AGAIN
        if self.error is not None:
            return self.error.code
        return "OK"

    @property
    def message(self) -> str:
        if self.retryable:
            return "The record changed while saving; please try again"
        if self.error is not None:
            return self.error.message
        return ""

    @classmethod
    def success(cls, value: T, *, warnings: tuple[str, ...] = ()) -> "Outcome[T]":
        return cls(value=value, warnings=tuple(warnings))

    @classmethod
    def failure(cls, error: AttendanceError) -> "Outcome[T]":
        return cls(error=error)

    @classmethod
    def conflict(cls) -> "Outcome[T]":
        return cls(retryable=True)


def retry_once(operation):
    """Run ``operation`` and retry a single time on a transient conflict.

    ``operation`` must re-read state on every call.
    """

    outcome = operation()
    if outcome.retryable:
        outcome = operation()
    return outcome
