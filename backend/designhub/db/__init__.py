"""Database package."""

from designhub.db.base import Base, BaseModel
from designhub.db.session import get_db_session

__all__ = ["Base", "BaseModel", "get_db_session"]
