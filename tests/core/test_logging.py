# tests/core/test_logging.py
"""Tests for structlog configuration."""

import json

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """configure_logging and get_logger."""

    def test_json_output_includes_bound_fields(self, capsys: pytest.CaptureFixture[str]) -> None:
        from tokentable.core.logging import configure_logging, get_logger

        configure_logging("INFO", json_output=True)
        get_logger("store").info("Stored token", row_key="abc")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "Stored token"
        assert event["component"] == "store"
        assert event["row_key"] == "abc"
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filters_lower_levels(self, capsys: pytest.CaptureFixture[str]) -> None:
        from tokentable.core.logging import configure_logging, get_logger

        configure_logging("WARNING", json_output=True)
        logger = get_logger()
        logger.info("hidden")
        logger.warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_unknown_level_rejected(self) -> None:
        from tokentable.core.logging import configure_logging

        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging("LOUD")
