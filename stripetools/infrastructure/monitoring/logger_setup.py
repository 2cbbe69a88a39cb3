"""Logging setup for the stripetools CLI.

stdout is reserved for the JSON result of a command, so every log record goes
to stderr and, when `logging.file` is configured, to a file as well. Level,
format and file come from the `logging.*` configuration keys.
"""

import logging
import sys
from typing import Optional

from stripetools.infrastructure.config.settings import get_config

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")

def resolve_log_level(name: Optional[str]) -> int:
    """Maps a level name such as 'debug' to its logging constant, WARNING if unknown."""
    if not name:
        return DEFAULT_LOG_LEVEL
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else DEFAULT_LOG_LEVEL

def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None
) -> None:
    """Replaces the root logger's handlers with a stderr handler and an optional file handler.

    Args:
        log_level: The minimum logging level (e.g., logging.DEBUG).
        log_format: The format string for log records.
        log_file: Optional path of a file that receives a copy of every record.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)

    def attach(handler: logging.Handler) -> None:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    attach(logging.StreamHandler(sys.stderr))
    if log_file:
        try:
            attach(logging.FileHandler(log_file, encoding='utf-8'))
        except OSError as e:
            logging.error(f"Cannot write log file {log_file}: {e}")

    # Request lines from the HTTP stack only matter when debugging
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(log_level if log_level <= logging.DEBUG else logging.WARNING)

    logging.debug(f"Logging configured. Level={logging.getLevelName(log_level)}, file={log_file}")

def configure_logging_from_settings() -> None:
    """Applies the logging.level, logging.format and logging.file configuration keys."""
    setup_logging(
        log_level=resolve_log_level(get_config('logging.level')),
        log_format=str(get_config('logging.format', DEFAULT_LOG_FORMAT)),
        log_file=get_config('logging.file'),
    )
