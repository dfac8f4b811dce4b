"""
Unit tests for core configuration, logging and exceptions.
"""
import json
import logging

import pytest


class TestSettings:
    """Unit tests for Settings."""

    def test_defaults(self):
        from conatus.core.config import Settings

        settings = Settings(_env_file=None)
        assert settings.app_name == "Conatus"
        assert settings.condition_max_nesting_level == 2
        assert settings.is_production is False

    def test_env_override(self, monkeypatch):
        from conatus.core.config import Settings

        monkeypatch.setenv("CONDITION_MAX_NESTING_LEVEL", "4")
        monkeypatch.setenv("APP_ENV", "production")

        settings = Settings(_env_file=None)
        assert settings.condition_max_nesting_level == 4
        assert settings.is_production is True


class TestFormatters:
    """Unit tests for log formatters."""

    def _record(self, **extra):
        record = logging.LogRecord("conatus.test", logging.WARNING, __file__, 10, "hello %s", ("world",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter(self):
        from conatus.core.logging import JSONFormatter

        data = json.loads(JSONFormatter().format(self._record(automation_id="a-1", decision=True)))

        assert data["message"] == "hello world"
        assert data["level"] == "WARNING"
        assert data["automation_id"] == "a-1"
        assert data["decision"] is True
        assert "request_id" not in data

    def test_console_formatter_does_not_mutate_record(self):
        from conatus.core.logging import ColoredConsoleFormatter

        record = self._record(request_id="0123456789abcdef")
        output = ColoredConsoleFormatter(fmt="%(levelname)s %(message)s").format(record)

        assert "req=01234567" in output
        assert record.levelname == "WARNING"

    def test_log_with_context(self, caplog):
        from conatus.core.logging import log_with_context

        logger = logging.getLogger("conatus.test")
        with caplog.at_level(logging.INFO, logger="conatus.test"):
            log_with_context(logger, logging.INFO, "ran", automation_id="a-9", user_id=None, extra_field="x")

        record = caplog.records[-1]
        assert record.automation_id == "a-9"
        assert record.extra_field == "x"
        assert not hasattr(record, "user_id")

    def test_setup_logging_writes_files(self, tmp_path):
        from conatus.core.logging import setup_logging

        root = logging.getLogger()
        saved = root.handlers[:]
        try:
            setup_logging(log_level="DEBUG", log_dir=str(tmp_path), app_name="unit")
            assert (tmp_path / "unit.log").exists()
            assert (tmp_path / "unit_decisions.log").exists()
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
                handler.close()
            gate_logger = logging.getLogger("conatus.automation.gate")
            for handler in gate_logger.handlers[:]:
                gate_logger.removeHandler(handler)
                handler.close()
            access_logger = logging.getLogger("access")
            for handler in access_logger.handlers[:]:
                access_logger.removeHandler(handler)
                handler.close()
            for handler in saved:
                root.addHandler(handler)


class TestExceptions:
    """Unit tests for the exception hierarchy."""

    def test_condition_logic_error_is_422(self):
        from conatus.core.exceptions import ConditionLogicError, ErrorCode

        exc = ConditionLogicError("too deep", code=ErrorCode.CND_NESTING_LIMIT)
        assert exc.status_code == 422
        assert exc.code == "CND_002"

    def test_engine_exception_to_dict(self):
        from conatus.automation.exceptions import TooManyConditionsError

        data = TooManyConditionsError(120, 100).to_dict()
        assert data["details"] == {"count": 120, "limit": 100}
        assert "maximum is 100" in data["error"]

    def test_error_response_excludes_none(self):
        from conatus.core.exceptions import create_error_response

        response = create_error_response("VAL_001", "bad", 422)
        body = json.loads(response.body)
        assert body == {"success": False, "error": {"code": "VAL_001", "message": "bad"}}
