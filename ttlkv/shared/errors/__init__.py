"""Unified error hierarchy for ttlkv.

All store errors inherit from TtlKvError and carry a stable ``code``.
Absence of a key is a normal result, never an error.
"""

from __future__ import annotations


class TtlKvError(Exception):
    """Base error for all ttlkv exceptions."""

    def __init__(self, message: str, code: str = "TTLKV_ERROR") -> None:
        self.code = code
        super().__init__(message)


class TypeMismatchError(TtlKvError):
    """incr/decr hit a key whose value is not numeric."""

    def __init__(self, key: str, kind: str = "opaque") -> None:
        self.key = key
        self.kind = kind
        super().__init__(
            f"Value for key {key!r} is not numeric (kind={kind})",
            code="TYPE_MISMATCH",
        )


class ValidationError(TtlKvError):
    """Argument or configuration validation failed."""

    def __init__(self, message: str, field: str = "") -> None:
        self.field = field
        super().__init__(message, code="VALIDATION")


class StoreClosedError(TtlKvError):
    """Operation attempted on a store after close()."""

    def __init__(self, message: str = "Store is closed") -> None:
        super().__init__(message, code="STORE_CLOSED")


__all__ = [
    "StoreClosedError",
    "TtlKvError",
    "TypeMismatchError",
    "ValidationError",
]
