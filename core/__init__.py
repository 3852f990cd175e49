"""
===========================================
Core infrastructure package for fluent-sql.
===========================================

Provides configuration management and logging used by the builder and the
database adapter.

Modules:
    config: Configuration from environment variables (.env)
    logger: Centralized logging configuration

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Default database: {config.database_url}")
"""

__version__ = "0.1.0"
__all__ = ['get_logger', 'setup_logging', 'config', 'Config']

from core.config import Config, config
from core.logger import get_logger, setup_logging
