"""Database package"""

from solodesk.db.session import AsyncSessionLocal, engine, get_db
from solodesk.models.base import Base

__all__ = ["Base", "AsyncSessionLocal", "engine", "get_db"]
