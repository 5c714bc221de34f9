"""Logging configuration for the FamilyTodo server."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path


_LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Module-level flag to track if logging has been configured
_logging_configured = False


def setup_logging(log_dir: Path | None = None, debug: bool = False) -> None:
    """Configure logging to write to both console and rotating files.

    This function is idempotent - multiple calls will only configure logging once.

    Args:
        log_dir: Directory for log files. If None, uses 'logs' in project root.
        debug: If True, sets DEBUG level, otherwise INFO.
    """
    global _logging_configured

    if _logging_configured:
        return

    if log_dir is None:
        log_dir = Path(__file__).parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    log_level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    # Rotates daily, keeps 30 days
    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(log_dir / "familytodo.log"),
        when="midnight",
        interval=1,
        backupCount=30,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    # ERROR and above only, kept longer
    error_file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(log_dir / "familytodo_errors.log"),
        when="midnight",
        interval=1,
        backupCount=90,
        encoding="utf-8",
    )
    error_file_handler.setLevel(logging.ERROR)
    error_file_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(error_file_handler)

    for name in (
        "familytodo",
        "familytodo.tasks",
        "familytodo.recurrence",
        "familytodo.realtime",
        "familytodo.database",
        "familytodo.system",
    ):
        logging.getLogger(name).setLevel(log_level)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.DEBUG if debug else logging.INFO)

    _logging_configured = True

    logging.getLogger("familytodo.system").info(
        "Logging configured: level=%s, log_dir=%s",
        logging.getLevelName(log_level),
        log_dir,
    )
