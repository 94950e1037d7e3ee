"""
Database module for the exchange core.

Exports database connection utilities.
"""

from hbx_core.db.connection import (
    check_db_connection,
    create_db_engine,
    get_engine,
    get_session,
    get_session_maker,
    init_db,
    reset_engine,
)

__all__ = [
    "check_db_connection",
    "create_db_engine",
    "get_engine",
    "get_session",
    "get_session_maker",
    "init_db",
    "reset_engine",
]
