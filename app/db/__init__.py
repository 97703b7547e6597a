"""Database package: async engine, sessions and repository helpers."""

from app.db.session import AsyncSessionLocal, Base, close_db, get_db, init_db

__all__ = ["AsyncSessionLocal", "Base", "close_db", "get_db", "init_db"]
