"""Tests for logging utilities."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler

from llm_search_kit.core.config import LoggingConfig
from llm_search_kit.core.logger import ROOT_LOGGER_NAME, get_logger, setup_logging


class TestLogger:
    """Tests for setup_logging and get_logger."""

    def test_get_logger_namespace(self) -> None:
        """Test that loggers live under the package namespace."""
        logger = get_logger("search.test")
        assert logger.name == f"{ROOT_LOGGER_NAME}.search.test"

    def test_get_logger_is_cached(self) -> None:
        """Test that the same logger instance is returned."""
        assert get_logger("cached") is get_logger("cached")

    def test_setup_logging_defaults(self) -> None:
        """Test default setup with a rich console handler."""
        setup_logging()

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert any(isinstance(h, RichHandler) for h in root.handlers)

    def test_setup_logging_level_applied_to_existing_loggers(self) -> None:
        """Test that already-created loggers follow the configured level."""
        logger = get_logger("level.check")

        setup_logging(LoggingConfig(level="DEBUG"))
        assert logger.level == logging.DEBUG

        setup_logging(LoggingConfig(level="WARNING"))
        assert logger.level == logging.WARNING

    def test_setup_logging_with_file(self, tmp_path) -> None:
        """Test logging to a rotating file."""
        log_file = tmp_path / "logs" / "search.log"

        setup_logging(LoggingConfig(level="INFO", log_file=str(log_file)))
        get_logger("file.test").info("hello from the test")
        for handler in logging.getLogger().handlers:
            handler.flush()

        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
        assert len(handlers) == 1
        assert "hello from the test" in log_file.read_text(encoding="utf-8")

    def test_setup_logging_replaces_handlers(self) -> None:
        """Test that repeated setup does not stack handlers."""
        setup_logging()
        setup_logging()

        rich_handlers = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
