"""
==========================
Utility Functions Package.
==========================

Database connectivity for the query builder.

Modules:
    database_utils: SQLAlchemy adapter, engine and connection providers
"""

__version__ = "0.1.0"
__all__ = [
    'DatabaseConnectionError',
    'SQLAlchemyConnection',
    'SQLAlchemyStatement',
    'check_database_available',
    'create_sqlalchemy_engine',
    'default_connection_provider',
    'engine_connection_provider',
    'get_default_engine',
]

from .database_utils import (
    DatabaseConnectionError,
    SQLAlchemyConnection,
    SQLAlchemyStatement,
    check_database_available,
    create_sqlalchemy_engine,
    default_connection_provider,
    engine_connection_provider,
    get_default_engine,
)
