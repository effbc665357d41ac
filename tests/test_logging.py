"""
Structured logging tests.

Covers:
- one JSON object per line, with extras and bound context merged in
- kernel exceptions flattened into exc_* fields
- LogContext binding as used by the engine and the gateway
- configure_logging installs a single handler until reset
"""

import json
import logging
from io import StringIO

import pytest

from stock_kernel.domain.values import TransactionType
from stock_kernel.exceptions import InvalidQuantityError
from stock_kernel.logging_config import (
    LogContext,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture
def stream():
    """Route the stock_kernel tree to a fresh stream, then restore the suite setup."""
    buffer = StringIO()
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=buffer)
    yield buffer
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _records(buffer: StringIO) -> list[dict]:
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line]


class TestStructuredFormatter:
    def test_record_header(self, stream):
        get_logger("services.persistence_gateway").info("collection_loaded")

        (record,) = _records(stream)
        assert record["level"] == "INFO"
        assert record["logger"] == "stock_kernel.services.persistence_gateway"
        assert record["message"] == "collection_loaded"
        assert record["ts"].endswith("+00:00")

    def test_extras_and_enums(self, stream):
        get_logger("engine").info(
            "action_applied", extra={"log_type": TransactionType.CHECK_OUT, "quantity": 4}
        )

        (record,) = _records(stream)
        assert record["log_type"] == "CHECK_OUT"
        assert record["quantity"] == 4

    def test_notes_keep_unicode(self, stream):
        get_logger("engine").info("action_applied", extra={"notes": "Available: 4 → 6"})
        assert "→" in stream.getvalue()

    def test_bound_context_merged(self, stream):
        with LogContext.bind(drug_id="drug-1", action="CheckIn"):
            get_logger("engine").info("action_applied")
        get_logger("engine").info("after")

        inside, after = _records(stream)
        assert (inside["drug_id"], inside["action"]) == ("drug-1", "CheckIn")
        assert "drug_id" not in after

    def test_kernel_error_flattened(self, stream):
        try:
            raise InvalidQuantityError("CHECK_OUT", 12, "only 10 available in stock", limit=10)
        except InvalidQuantityError:
            get_logger("engine").warning("action_rejected", exc_info=True)

        (record,) = _records(stream)
        assert record["exc_type"] == "InvalidQuantityError"
        assert record["exc_code"] == "INVALID_QUANTITY"
        assert record["exc_quantity"] == 12
        assert record["exc_limit"] == 10
        assert "Traceback" in record["traceback"]

    def test_plain_error_has_no_code(self, stream):
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("engine").error("failed", exc_info=True)

        (record,) = _records(stream)
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record


class TestLogContext:
    def test_bind_restores_outer_value(self):
        LogContext.set(store_id="bin-outer")
        with LogContext.bind(store_id="bin-inner"):
            assert LogContext.get_all() == {"store_id": "bin-inner"}
        assert LogContext.get_all() == {"store_id": "bin-outer"}

    def test_none_leaves_field_unset(self):
        with LogContext.bind(drug_id="drug-1", store_id=None):
            assert LogContext.get_all() == {"drug_id": "drug-1"}

    def test_set_rejects_unknown_field(self):
        with pytest.raises(TypeError, match="correlation_id"):
            LogContext.set(correlation_id="x")

    def test_bind_rejects_unknown_field(self):
        with pytest.raises(TypeError, match="correlation_id"):
            with LogContext.bind(drug_id="drug-1", correlation_id="x"):
                pass
        assert LogContext.get_all() == {}

    def test_clear(self):
        LogContext.set(drug_id="drug-1", action="MarkOOD")
        LogContext.clear()
        assert LogContext.get_all() == {}


class TestConfigureLogging:
    def test_second_call_keeps_first_handler(self, stream):
        first = configure_logging(stream=StringIO())
        assert configure_logging(stream=StringIO()) is first
        assert logging.getLogger("stock_kernel").handlers == [first]

    def test_level_by_name(self):
        buffer = StringIO()
        reset_logging()
        try:
            configure_logging(level="WARNING", stream=buffer)
            get_logger("cli").info("dropped")
            get_logger("cli").warning("kept")
        finally:
            reset_logging()
            configure_logging(level=logging.DEBUG)
        assert [r["message"] for r in _records(buffer)] == ["kept"]
