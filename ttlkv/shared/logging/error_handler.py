"""Structured error logging handler.

- Error logs contain: error_code, stack_trace, component, context
- JSON-friendly dict output for log aggregation
- error_code comes from ``TtlKvError.code`` or falls back to the exception class
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class StructuredError:
    """Structured representation of an error for logging."""

    error_code: str
    message: str
    stack_trace: str
    component: str = ""
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def create_structured_error(
    exc: BaseException,
    *,
    component: str = "",
    context: dict[str, Any] | None = None,
) -> StructuredError:
    stack = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return StructuredError(
        error_code=getattr(exc, "code", type(exc).__name__),
        message=str(exc),
        stack_trace="".join(stack),
        component=component,
        context=dict(context or {}),
    )


def log_structured_error(
    logger: logging.Logger,
    exc: BaseException,
    *,
    component: str = "",
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> StructuredError:
    """Log an exception as a structured error.

    The record's message is the fixed string ``structured_error``; the details
    ride in ``record.structured_error`` for handlers that emit JSON.
    """
    structured = create_structured_error(exc, component=component, context=context)
    logger.log(level, "structured_error", extra={"structured_error": structured.to_dict()})
    return structured
