"""Database engine, sessions and ORM models for the status store."""

from .db_connection import (
    create_db_engine,
    create_session_factory,
    init_db,
    session_scope,
)
from .db_models import DBKeyValueEntry, UnderplayedDBBase

__all__ = [
    "DBKeyValueEntry",
    "UnderplayedDBBase",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "session_scope",
]
