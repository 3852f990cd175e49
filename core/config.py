"""
========================================
Configuration management for fluent-sql.
========================================

Loads settings from environment variables (.env file) and provides a
centralized Config singleton for application-wide access.

Settings:
    FLUENT_SQL_DATABASE_URL: SQLAlchemy URL of the default engine (sqlite://)
    FLUENT_SQL_ECHO: Log every SQL statement SQLAlchemy emits (false)
    FLUENT_SQL_PLACEHOLDER_PREFIX: Prefix of generated placeholder names (param_)
    FLUENT_SQL_DRY_RUN: Make execute() render instead of run by default (false)
    FLUENT_SQL_LOG_LEVEL: Default logging level (INFO)

Example:
    >>> from core.config import config
    >>>
    >>> engine_url = config.get_connection_string()
    >>> print(f"Placeholders start with {config.query.placeholder_prefix}")
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

_TRUTHY = ('1', 'true', 'yes', 'on')


def _env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


@dataclass
class DatabaseConfig:
    """Database configuration settings.

    Attributes:
        url: SQLAlchemy database URL
        echo: Log emitted SQL through SQLAlchemy's logger
        pool_pre_ping: Check pooled connections before handing them out
    """

    url: str
    echo: bool = False
    pool_pre_ping: bool = True

    def get_connection_string(self) -> str:
        """Get the SQLAlchemy-compatible connection string."""
        return self.url


@dataclass
class QueryConfig:
    """Query builder defaults.

    Attributes:
        placeholder_prefix: Prefix of every generated placeholder namespace
        dry_run: Default for Select.execute(debug=None)
    """

    placeholder_prefix: str = 'param_'
    dry_run: bool = False


@dataclass
class LoggingConfig:
    """Logging defaults.

    Attributes:
        level: Root logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
    """

    level: str = 'INFO'


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig with the default engine settings
        query: QueryConfig with builder defaults
        logging: LoggingConfig with log defaults

    Example:
        >>> config = Config()
        >>> config.db.url
        'sqlite://'
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            url=os.getenv('FLUENT_SQL_DATABASE_URL', 'sqlite://'),
            echo=_env_flag('FLUENT_SQL_ECHO'),
        )

        self.query = QueryConfig(
            placeholder_prefix=os.getenv('FLUENT_SQL_PLACEHOLDER_PREFIX', 'param_'),
            dry_run=_env_flag('FLUENT_SQL_DRY_RUN'),
        )

        self.logging = LoggingConfig(
            level=os.getenv('FLUENT_SQL_LOG_LEVEL', 'INFO').upper(),
        )

    @property
    def database_url(self) -> str:
        """Get the default database URL."""
        return self.db.url

    def get_connection_string(self) -> str:
        """Get database connection string.

        Returns:
            SQLAlchemy-compatible connection string
        """
        return self.db.get_connection_string()


# Global configuration instance
config = Config()
