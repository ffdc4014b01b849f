"""Tests for structured error logging.

Verifies: error_code, stack_trace, component and context in structured logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ttlkv.shared.errors import TypeMismatchError
from ttlkv.shared.logging.error_handler import (
    StructuredError,
    create_structured_error,
    log_structured_error,
)

if TYPE_CHECKING:
    import pytest


class TestCreateStructuredError:
    def test_from_generic_exception(self) -> None:
        exc = ValueError("bad value")
        try:
            raise exc
        except ValueError:
            result = create_structured_error(exc)
        assert result.error_code == "ValueError"
        assert result.message == "bad value"
        assert "ValueError" in result.stack_trace

    def test_uses_code_attribute(self) -> None:
        result = create_structured_error(TypeMismatchError("k"))
        assert result.error_code == "TYPE_MISMATCH"

    def test_component_and_context(self) -> None:
        result = create_structured_error(
            RuntimeError("x"),
            component="ttlkv-sweeper",
            context={"pending_ttls": 2},
        )
        assert result.component == "ttlkv-sweeper"
        assert result.context == {"pending_ttls": 2}

    def test_context_is_copied(self) -> None:
        context = {"keys": 1}
        result = create_structured_error(RuntimeError("x"), context=context)
        context["keys"] = 99
        assert result.context == {"keys": 1}


class TestStructuredErrorToDict:
    def test_to_dict_has_all_fields(self) -> None:
        err = StructuredError(
            error_code="E",
            message="m",
            stack_trace="",
            component="sweep",
            context={"interval_seconds": 1.0},
        )
        assert err.to_dict() == {
            "error_code": "E",
            "message": "m",
            "stack_trace": "",
            "component": "sweep",
            "context": {"interval_seconds": 1.0},
        }


class TestLogStructuredError:
    def test_logs_with_extra(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("ttlkv.test")
        with caplog.at_level(logging.ERROR, logger="ttlkv.test"):
            structured = log_structured_error(
                logger,
                RuntimeError("boom"),
                component="sweep",
                context={"pending_ttls": 3},
            )
        assert structured.error_code == "RuntimeError"
        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.levelno == logging.ERROR
        assert record.getMessage() == "structured_error"
        payload = record.structured_error  # type: ignore[attr-defined]
        assert payload["component"] == "sweep"
        assert payload["context"] == {"pending_ttls": 3}

    def test_custom_level(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("ttlkv.test")
        with caplog.at_level(logging.WARNING, logger="ttlkv.test"):
            log_structured_error(logger, RuntimeError("w"), level=logging.WARNING)
        assert caplog.records[0].levelno == logging.WARNING
