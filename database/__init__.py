"""
Database Package Initialization.

============================================================
PURPOSE
============================================================
SQLAlchemy engine and session management shared by the
datastore-backed country catalog and the import script.

REQUIRED:
- Every write runs inside an explicit transaction
- Every failure raises a hard exception

============================================================
"""

# Core engine and session management
from .engine import (
    # Declarative base
    Base,
    DEFAULT_SQLITE_URL,

    # Engine creation
    get_database_url,
    create_database_engine,
    get_engine,
    dispose_engine,

    # Session management
    get_session_factory,
    get_db_session,
    transaction_scope,

    # Database initialization
    verify_database_connection,
    create_all_tables,

    # Exceptions
    DatabasePersistenceError,
    DatabaseConnectionError,
    DatabaseInitializationError,
)


__all__ = [
    "Base",
    "DEFAULT_SQLITE_URL",
    "get_database_url",
    "create_database_engine",
    "get_engine",
    "dispose_engine",
    "get_session_factory",
    "get_db_session",
    "transaction_scope",
    "verify_database_connection",
    "create_all_tables",
    "DatabasePersistenceError",
    "DatabaseConnectionError",
    "DatabaseInitializationError",
]
