"""Logging setup for the ColdSync authorization engine.

Loggers are plain ``logging`` loggers named per component (``rbac.roles``,
``rbac.evaluator``, ...). Handlers are only attached by ``setup_logger``;
library code just calls ``get_logger`` so embedding applications keep
control over where the records go.
"""

import logging
import logging.handlers
import os
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logger(
    name: str,
    log_dir: str = "/var/log/coldsync",
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    file_logging: bool = False,
    console_logging: bool = True,
    max_bytes: int = 5242880,  # 5MB
    backup_count: int = 3,
) -> logging.Logger:
    """Attach handlers to a component logger.

    Args:
        name: Logger name, e.g. ``rbac`` to cover every engine component
        log_dir: Directory for the rotating log file
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom record format
        date_format: Custom date format (ISO 8601 by default)
        file_logging: Write to ``<log_dir>/<name>.log``
        console_logging: Write to stderr
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files to keep

    Returns:
        The configured logger

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    logger = logging.getLogger(name)

    level_upper = level.upper()
    if level_upper not in VALID_LEVELS:
        raise ValueError(
            f"Invalid log level: {level}. Must be one of: {', '.join(VALID_LEVELS)}"
        )
    logger.setLevel(getattr(logging, level_upper))

    # Already configured, only the level is refreshed
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        log_format or DEFAULT_FORMAT, datefmt=date_format or DEFAULT_DATE_FORMAT
    )

    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, f"{name}.log"),
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console_logging:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def setup_from_settings(settings, name: str = "rbac") -> logging.Logger:
    """Configure the engine's root component logger from ``Settings``.

    Per-decision records go to ``<name>.evaluator.decisions`` and are only
    emitted when ``settings.log_decisions`` is set, whatever the base level.
    """
    logger = setup_logger(
        name,
        log_dir=settings.log_dir,
        level=settings.log_level,
        file_logging=settings.log_to_file,
        console_logging=settings.log_to_console,
    )
    logging.getLogger(f"{name}.evaluator.decisions").setLevel(
        logging.DEBUG if settings.log_decisions else logging.INFO
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a component, without touching its handlers."""
    return logging.getLogger(name)
