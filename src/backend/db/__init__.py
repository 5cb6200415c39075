"""Database module."""

from db.base import Base
from db.session import close_db, get_db, get_engine, get_session_factory, init_db

__all__ = ["Base", "get_db", "get_engine", "get_session_factory", "init_db", "close_db"]
