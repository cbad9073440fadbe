"""
Tests for logging setup.
"""

import logging
import logging.handlers

from zpool_exporter.logging import (
    ROOT_LOGGER,
    ColoredFormatter,
    LogConfig,
    get_log_level,
    get_logger,
    setup_logging,
)


def test_get_logger_is_namespaced() -> None:
    """Test that loggers live under the package logger."""
    assert get_logger("collector").name == "zpool_exporter.collector"
    assert get_logger("zpool_exporter.http").name == "zpool_exporter.http"


def test_get_log_level() -> None:
    """Test level name conversion."""
    assert get_log_level("DEBUG") == logging.DEBUG
    assert get_log_level("warn") == logging.WARNING
    assert get_log_level("chatty") == logging.INFO


def test_setup_logging_with_file(tmp_path) -> None:
    """Test console and rotating file handlers."""
    path = tmp_path / "logs" / "exporter.log"
    setup_logging(LogConfig(console_level="error", file_enabled=True, file_path=str(path)))

    root = logging.getLogger(ROOT_LOGGER)
    try:
        handlers = root.handlers
        assert len(handlers) == 2
        assert handlers[0].level == logging.ERROR
        assert isinstance(handlers[1], logging.handlers.RotatingFileHandler)

        get_logger("test").warning("pool tank degraded")
        handlers[1].flush()

        assert "pool tank degraded" in path.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()


def test_colored_formatter_restores_record() -> None:
    """Test that coloring does not leak into the log record."""
    formatter = ColoredFormatter(fmt="%(levelname)s %(name)s %(message)s", use_colors=True)
    record = logging.LogRecord(
        "zpool_exporter.collector", logging.ERROR, __file__, 1, "boom", None, None
    )

    formatted = formatter.format(record)

    assert "\033[" in formatted
    assert record.levelname == "ERROR"
    assert record.msg == "boom"
