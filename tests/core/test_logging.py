"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from astdelta.config.models import LoggingConfig, LogOutputConfig
from astdelta.core.logging import (
    clear_pair_id,
    configure_logging,
    get_logger,
    get_pair_id,
    set_pair_id,
)


class TestPairIdCorrelation:
    """Pair ID context variable tests."""

    def setup_method(self) -> None:
        """Clear pair ID before each test."""
        clear_pair_id()

    def test_given_pair_id_when_set_then_can_retrieve(self) -> None:
        """Pair ID can be set and retrieved."""
        # Given
        pair_id = "checkstyle-119fd4fb/Main.java"

        # When
        result = set_pair_id(pair_id)

        # Then
        assert result == pair_id
        assert get_pair_id() == pair_id

    def test_given_no_id_when_set_then_generates_uuid(self) -> None:
        """Set generates UUID-based ID when none provided."""
        # When
        pid = set_pair_id()

        # Then
        assert pid is not None
        assert len(pid) == 12  # uuid4().hex[:12]

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        # Given
        set_pair_id("to-clear")

        # When
        clear_pair_id()

        # Then
        assert get_pair_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_pair_id()

    def teardown_method(self) -> None:
        clear_pair_id()

    def test_given_json_format_when_log_then_valid_json_output(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """JSON format produces valid JSON with required fields."""
        # Given
        configure_logging(json_format=True, level="INFO")
        logger = get_logger("test")

        # When
        logger.info("test message", key="value")

        # Then
        captured = capsys.readouterr()
        lines = [line for line in captured.err.strip().split("\n") if line]
        if lines:
            data = json.loads(lines[-1])
            assert data["event"] == "test message"
            assert data["key"] == "value"
            assert "timestamp" in data
            assert data["level"] == "info"

    def test_given_pair_id_when_log_then_pair_id_in_event(self, tmp_path: Path) -> None:
        """The current pair ID is bound into every event."""
        # Given
        log_file = tmp_path / "pairs.log"
        configure_logging(
            config=LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))])
        )
        set_pair_id("pair-7")

        # When
        get_logger("test").info("matched")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "matched"
        assert data["pair_id"] == "pair-7"

    def test_given_nested_file_output_when_configure_then_directory_created(self, tmp_path: Path) -> None:
        log_file = tmp_path / "nested" / "astdelta.log"
        configure_logging(
            config=LoggingConfig(outputs=[LogOutputConfig(format="console", destination=str(log_file))])
        )
        assert log_file.parent.is_dir()

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        """LoggingConfig object takes precedence over simple params."""
        # Given
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        # When  - config's DEBUG should override the level="ERROR" param
        configure_logging(config=config, json_format=False, level="ERROR")
        logger = get_logger()
        logger.debug("debug msg")

        # Then
        assert "debug msg" in log_file.read_text()

    def test_given_multi_output_config_when_configure_then_logs_to_all(
        self, tmp_path: Path
    ) -> None:
        """Multiple outputs receive logs according to their levels."""
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content

        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content
