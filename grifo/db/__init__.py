"""Database package: async SQLAlchemy engine holder, session dependency, Base."""
from grifo.db.base import Base, Database, get_db

__all__ = ["Base", "Database", "get_db"]
