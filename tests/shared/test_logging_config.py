# tests/shared/test_logging_config.py
import json
import logging

import pytest
import structlog

from cleanweb.shared.config import LogFormat
from cleanweb.shared.logging_config import HANDLER_NAME, configure_logging, logging_scope
from tests.conftest import make_settings

pytestmark = pytest.mark.usefixtures("restore_logging")


def _json_lines(out):
    return [json.loads(line) for line in out.splitlines() if line.startswith("{")]


class TestConfigureLogging:
    def test_json_entries_carry_context(self, capsys):
        log = configure_logging(make_settings(LOG_FORMAT=LogFormat.JSON))

        with structlog.contextvars.bound_contextvars(request_id="req-1"):
            log.info("something_happened", answer=42)

        entry = _json_lines(capsys.readouterr().out)[-1]
        assert entry["event"] == "something_happened"
        assert entry["answer"] == 42
        assert entry["request_id"] == "req-1"
        assert entry["level"] == "info"
        assert entry["logger"] == "cleanweb"
        assert entry["trace_id"] is None
        assert "timestamp" in entry

    def test_stdlib_records_use_the_same_format(self, capsys):
        configure_logging(make_settings(LOG_FORMAT=LogFormat.JSON))

        logging.getLogger("uvicorn.error").warning("port in use")

        entry = _json_lines(capsys.readouterr().out)[-1]
        assert entry["event"] == "port in use"
        assert entry["logger"] == "uvicorn.error"

    def test_console_format(self, capsys):
        log = configure_logging(make_settings(LOG_FORMAT=LogFormat.CONSOLE))

        log.warning("disk_low", free_mb=12)

        out = capsys.readouterr().out
        assert "disk_low" in out
        assert "free_mb=12" in out

    def test_level_is_applied(self, capsys):
        log = configure_logging(make_settings(LOG_LEVEL="warning", LOG_FORMAT=LogFormat.JSON))

        log.info("hidden")
        log.error("shown")

        events = [entry["event"] for entry in _json_lines(capsys.readouterr().out)]
        assert events == ["shown"]

    def test_reconfiguring_replaces_own_handler(self):
        configure_logging(make_settings())
        configure_logging(make_settings())

        names = [h.get_name() for h in logging.getLogger().handlers]
        assert names.count(HANDLER_NAME) == 1


class TestLoggingScope:
    def test_clean_exit_logs_stop(self, capsys):
        with logging_scope(make_settings(LOG_FORMAT=LogFormat.JSON)) as log:
            log.info("working")

        events = [entry["event"] for entry in _json_lines(capsys.readouterr().out)]
        assert events[-2:] == ["working", "host_stopped"]

    def test_failure_is_logged_and_reraised(self, capsys):
        with pytest.raises(RuntimeError, match="startup failed"):
            with logging_scope(make_settings(LOG_FORMAT=LogFormat.JSON)):
                raise RuntimeError("startup failed")

        entries = _json_lines(capsys.readouterr().out)
        critical = next(e for e in entries if e["event"] == "host_terminated_unexpectedly")
        assert critical["level"] == "critical"
        assert "startup failed" in critical["exception"]
        assert entries[-1]["event"] == "host_stopped"
