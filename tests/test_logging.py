"""Tests for the structured logging system (gl_kernel/logging_config.py)."""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from io import StringIO
from uuid import uuid4

import pytest

from gl_kernel.domain.lifecycle import PostingStage
from gl_kernel.domain.sod import PostingAction, Role
from gl_kernel.exceptions import SoDViolationError, UnbalancedJournalError
from gl_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "gl_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("validated", extra={"line_count": 2, "currency": "MYR"})

        record = _parse_log(stream)
        assert record["line_count"] == 2
        assert record["currency"] == "MYR"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(correlation_id="abc-123", journal_number="JE-1")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["journal_number"] == "JE-1"

    def test_posting_error_fields_extracted(self):
        """Kernel exceptions carry .code and structured attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")

        try:
            raise UnbalancedJournalError(Decimal("100"), Decimal("90"), Decimal("10"))
        except UnbalancedJournalError:
            logger.error("posting_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "UnbalancedJournalError"
        assert record["exc_code"] == "UNBALANCED_JOURNAL"
        assert record["exc_total_debit"] == "100"
        assert record["exc_difference"] == "10"
        assert "exc_message" in record
        assert "traceback" in record

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "tenant_id" not in record

    def test_uuid_and_decimal_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info("values", extra={"account_id": uid, "amount": Decimal("1.50")})

        record = _parse_log(stream)
        assert record["account_id"] == str(uid)
        assert record["amount"] == "1.50"

    def test_enum_and_date_serialized(self):
        class Side(Enum):
            DEBIT = 1

        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "values",
            extra={
                "side": Side.DEBIT,
                "stage": PostingStage.VALIDATED,
                "journal_date": date(2024, 6, 15),
                "posted_at": datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc),
            },
        )

        record = _parse_log(stream)
        assert record["side"] == 1
        assert record["stage"] == "validated"
        assert record["journal_date"] == "2024-06-15"
        assert record["posted_at"] == "2024-06-15T09:30:00+00:00"

    def test_sets_sorted_and_unknown_objects_repr(self):
        class Opaque:
            def __repr__(self):
                return "<opaque>"

        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("values", extra={"codes": {"b", "a"}, "thing": Opaque()})

        record = _parse_log(stream)
        assert record["codes"] == ["a", "b"]
        assert record["thing"] == "<opaque>"

    def test_enum_exception_attribute_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise SoDViolationError(PostingAction.JOURNAL_POST, Role.CLERK, "no_permission")
        except SoDViolationError:
            get_logger("test").error("denied", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "SOD_VIOLATION"
        assert record["exc_action"] == "journal:post"
        assert record["exc_user_role"] == "clerk"

    def test_debug_suppressed_at_info(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        assert [r["message"] for r in logs] == ["first", "second"]


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", tenant_id="t")
        assert LogContext.get_all() == {"correlation_id": "x", "tenant_id": "t"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner"):
            assert LogContext.get_all()["correlation_id"] == "inner"
        assert LogContext.get_all()["correlation_id"] == "outer"

    def test_bind_restores_none(self):
        assert "journal_number" not in LogContext.get_all()
        with LogContext.bind(journal_number="JE-9"):
            assert LogContext.get_all()["journal_number"] == "JE-9"
        assert "journal_number" not in LogContext.get_all()

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            tenant_id="t",
            company_id="co",
            user_id="u",
            journal_number="j",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 5
        assert ctx["company_id"] == "co"


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)
        assert len(logging.getLogger("gl_kernel").handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("services.posting_orchestrator")
        assert logger.name == "gl_kernel.services.posting_orchestrator"

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "gl_kernel.deep.nested.module"

    def test_full_logger_name_not_prefixed_twice(self):
        assert get_logger("gl_kernel.config").name == "gl_kernel.config"


class TestLogContextFields:
    """Context field names are a closed set."""

    def test_unknown_field_rejected_by_set(self):
        with pytest.raises(TypeError, match="request_id"):
            LogContext.set(request_id="r-1")

    def test_unknown_field_rejected_by_bind_without_side_effects(self):
        with pytest.raises(TypeError):
            with LogContext.bind(correlation_id="c", request_id="r-1"):
                pass
        assert LogContext.get_all() == {}
