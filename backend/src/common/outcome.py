"""
Tagged result type for best-effort steps.

Every fallible step of the document pipeline returns an ``Outcome`` instead of
raising: either ``Ok(value)`` or ``Degraded(value, reason)``. A degraded
outcome still carries a usable value (zero, today, a timestamp number...),
so callers can log the reason and keep going.

Usage:
    parsed = parse_decimal("12.50")
    if parsed.is_degraded:
        logger.warning(parsed.reason)
    amount = parsed.value
"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class Outcome(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: T
    reason: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.reason is not None

    @property
    def is_ok(self) -> bool:
        return self.reason is None

    @classmethod
    def ok(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def degraded(cls, value: T, reason: str) -> "Outcome[T]":
        return cls(value=value, reason=reason)
