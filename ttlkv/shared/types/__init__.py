"""Shared domain types used across layers.

These types flow through the store port and the expiration index.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ValueKind(Enum):
    """Variant tag of a stored value."""

    NUMERIC = "numeric"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class StoredValue:
    """A value as held by the store: a kind tag plus the caller's payload.

    Classification happens once, on the way in. incr/decr only look at
    ``kind``.
    """

    kind: ValueKind
    payload: Any

    @classmethod
    def wrap(cls, payload: Any) -> StoredValue:
        # bool is an int subclass but is not a counter
        if isinstance(payload, (int, float)) and not isinstance(payload, bool):
            return cls(ValueKind.NUMERIC, payload)
        return cls(ValueKind.OPAQUE, payload)

    @classmethod
    def numeric(cls, number: int | float) -> StoredValue:
        return cls(ValueKind.NUMERIC, number)

    @property
    def is_numeric(self) -> bool:
        return self.kind is ValueKind.NUMERIC


@dataclass
class ExpirationEntry:
    """A (key, expires_at) slot in the expiration index.

    ``expires_at`` is on the store clock's timescale (monotonic seconds by
    default) and is rewritten in place when a key's TTL is replaced.
    """

    key: str
    expires_at: float


__all__ = [
    "ExpirationEntry",
    "StoredValue",
    "ValueKind",
]
