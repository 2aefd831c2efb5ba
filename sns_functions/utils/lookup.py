from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Outcome of a best-effort lookup: either a found value or the reason it is missing."""

    value: T | None = None
    found: bool = False
    reason: str | None = None

    @classmethod
    def hit(cls, value: T) -> "Lookup[T]":
        return cls(value=value, found=True)

    @classmethod
    def miss(cls, reason: str) -> "Lookup[T]":
        return cls(value=None, found=False, reason=reason)

    def or_default(self, default: T) -> T:
        if self.found and self.value is not None:
            return self.value
        return default
