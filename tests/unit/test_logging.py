"""
Unit tests for the structured logging subsystem.
"""

import json
import logging

import pytest

from bloodcraft.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    clear_log_context,
    get_log_context,
    get_logging_health,
    reset_log_context,
    set_log_context,
    setup_logging,
    shutdown_logging,
)


def _record(**extra):
    record = logging.LogRecord(
        name="bloodcraft.modules.leveling.store",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Experience awarded",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestLogContext:
    def test_sync_block_sets_and_restores(self):
        with LogContext(player_id=7, operation="process_kill", correlation_id="abc"):
            context = get_log_context()
            assert context["player_id"] == "7"
            assert context["operation"] == "process_kill"
            assert context["correlation_id"] == "abc"

        assert "correlation_id" not in get_log_context()

    @pytest.mark.asyncio
    async def test_async_block_generates_correlation_id(self):
        async with LogContext(operation="give_experience"):
            assert len(get_log_context()["correlation_id"]) == 8

    def test_set_and_reset(self):
        token = set_log_context(player_id=9, event_name="leveling.level_changed")
        assert get_log_context()["event_name"] == "leveling.level_changed"

        reset_log_context(token)
        assert "event_name" not in get_log_context()

    def test_clear(self):
        set_log_context(operation="set_level")
        clear_log_context()
        assert get_log_context() == {}


@pytest.mark.unit
class TestContextFilter:
    def test_copies_context_onto_record(self):
        record = _record()
        with LogContext(player_id=42, operation="process_kill"):
            ContextFilter().filter(record)

        assert record.player_id == "42"
        assert record.operation == "process_kill"
        assert record.component == "bloodcraft"

    def test_explicit_extra_wins(self):
        record = _record(operation="set_level")
        with LogContext(operation="process_kill"):
            ContextFilter().filter(record)

        assert record.operation == "set_level"


@pytest.mark.unit
def test_json_formatter_includes_context_and_extra():
    record = _record(player_id="42", operation="N/A", amount=7.5)

    data = json.loads(JSONFormatter().format(record))

    assert data["message"] == "Experience awarded"
    assert data["level"] == "INFO"
    assert data["player_id"] == "42"
    assert "operation" not in data
    assert data["extra"]["amount"] == 7.5


@pytest.mark.unit
def test_setup_and_shutdown_are_idempotent():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level

    try:
        setup_logging()
        setup_logging()
        assert get_logging_health().initialized

        logging.getLogger("bloodcraft.test").info("hello", extra={"player_id": 1})

        shutdown_logging()
        shutdown_logging()
        assert not get_logging_health().initialized
    finally:
        shutdown_logging()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
