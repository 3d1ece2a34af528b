"""Database package: declarative base and the store handle."""

from projectdesk.db.base import Base, Database

__all__ = [
    "Base",
    "Database",
]
