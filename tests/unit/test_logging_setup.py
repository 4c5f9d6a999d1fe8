"""Tests for logging configuration."""

import logging
from unittest.mock import patch

from rentledger.services.logging import get_log_level, setup_logging


class TestSetupLogging:
    """Test journal logging configuration."""

    def setup_method(self):
        """Save original handlers before each test."""
        self.root_logger = logging.getLogger()
        self.original_handlers = self.root_logger.handlers.copy()
        self.original_level = self.root_logger.level

    def teardown_method(self):
        """Restore original handlers after each test."""
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.original_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.original_level)

    def test_creates_log_directory(self, tmp_path) -> None:
        """Verify setup_logging creates the log directory if missing."""
        log_file = tmp_path / "nested" / "journal.log"
        assert not log_file.parent.exists()

        setup_logging(str(log_file))

        assert log_file.parent.exists()

    def test_creates_stdout_and_file_handlers(self, tmp_path) -> None:
        setup_logging(str(tmp_path / "journal.log"))

        handler_types = {type(handler) for handler in self.root_logger.handlers}
        assert len(self.root_logger.handlers) == 2
        assert logging.FileHandler in handler_types
        assert logging.StreamHandler in handler_types

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path) -> None:
        """Verify calling setup twice still leaves exactly two handlers."""
        setup_logging(str(tmp_path / "journal.log"))
        setup_logging(str(tmp_path / "journal.log"))

        assert len(self.root_logger.handlers) == 2

    def test_level_from_environment(self, tmp_path) -> None:
        """Verify LOG_LEVEL drives the root and handler levels."""
        with patch.dict("os.environ", {"LOG_LEVEL": "WARNING"}, clear=False):
            setup_logging(str(tmp_path / "journal.log"))

        assert self.root_logger.level == logging.WARNING
        for handler in self.root_logger.handlers:
            assert handler.level == logging.WARNING

    def test_explicit_level_overrides_environment(self, tmp_path) -> None:
        """Verify a configured level name wins over LOG_LEVEL."""
        with patch.dict("os.environ", {"LOG_LEVEL": "ERROR"}, clear=False):
            setup_logging(str(tmp_path / "journal.log"), level="debug")

        assert self.root_logger.level == logging.DEBUG

    def test_writes_to_file(self, tmp_path) -> None:
        """Verify messages reach the log file in the expected format."""
        log_file = tmp_path / "journal.log"
        with patch.dict("os.environ", {"LOG_LEVEL": "INFO"}, clear=False):
            logger = setup_logging(str(log_file))

        logger.info("regenerated REH")
        for handler in self.root_logger.handlers:
            handler.flush()

        content = log_file.read_text()
        assert "rentledger - INFO - regenerated REH" in content


def test_get_log_level_unknown_defaults_to_info():
    with patch.dict("os.environ", {"LOG_LEVEL": "chatty"}, clear=False):
        assert get_log_level() == logging.INFO
