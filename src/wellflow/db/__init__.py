"""Database layer: SQLite connection management and the state store."""

from wellflow.db.connection import DatabaseConnection, get_db, set_db

__all__ = ["DatabaseConnection", "get_db", "set_db"]
