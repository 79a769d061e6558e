"""Database package."""

from taskboard.db.base import Base
from taskboard.db.session import Database, close_database, get_db_session, open_database

__all__ = ["Base", "Database", "close_database", "get_db_session", "open_database"]
