"""Relational storage modules."""

from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import Base

__all__ = ["Database", "Base"]
