"""Logging configuration for quantum-synth."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from generator.settings import LOG_FILE, LOG_FORMAT, LOG_LEVEL


def setup_logging(
    name: str = "",
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        name: Logger name ("" configures the root logger, which the core,
            generator and validation loggers propagate to)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to a rotating log file; console only when omitted

    Returns:
        Configured logger instance
    """
    if level is None:
        level = LOG_LEVEL
    if log_file is None and LOG_FILE:
        log_file = Path(LOG_FILE)
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(LOG_FORMAT)

    # Calling twice must not duplicate output
    for handler in list(logger.handlers):
        if getattr(handler, "_qsynth", False):
            logger.removeHandler(handler)
            handler.close()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    console_handler._qsynth = True
    logger.addHandler(console_handler)

    # File handler
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        file_handler._qsynth = True
        logger.addHandler(file_handler)

    return logger
