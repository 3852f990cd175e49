"""
===================================
Centralized logging for fluent-sql.
===================================

Provides one logging setup for the builder and the database adapter:
- Console output, colored when attached to a terminal
- Optional log file
- Level taken from config (FLUENT_SQL_LOG_LEVEL) unless overridden

The builder logs rendered statements at DEBUG, unbalanced groups at WARNING,
and rejected statements or missing connections at ERROR.

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> setup_logging(log_level='DEBUG', log_file='queries.log')
    >>> logger = get_logger(__name__)
    >>> logger.debug("Executing: SELECT 1")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter adding ANSI colors to the level name.

    Attributes:
        COLORS: Dict mapping level names to ANSI color codes
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        """Format record with a colored level name.

        The record is copied so other handlers still see the plain level.
        """
        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__ of calling module)
        level: Optional logging level override

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: Optional[bool] = None
) -> None:
    """Configure the root logger.

    Args:
        log_level: Logging level, defaults to config.logging.level
        log_file: Optional log file name
        log_dir: Directory for log_file (defaults to 'logs/')
        console_output: If True, log to stdout
        use_colors: Colored console output; defaults to whether stdout is a TTY

    Example:
        >>> setup_logging(log_level='DEBUG', log_file='queries.log', log_dir='var/log')
    """
    level = getattr(logging, (log_level or config.logging.level).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        if use_colors is None:
            use_colors = sys.stdout.isatty()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        formatter_class = ColoredFormatter if use_colors else logging.Formatter
        console_handler.setFormatter(formatter_class(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir) if log_dir else Path('logs')
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)


def _init_default_logging():
    """Set up console logging on import if nothing configured the root logger."""
    if not logging.getLogger().handlers:
        setup_logging()


# Auto-initialize on import
_init_default_logging()
