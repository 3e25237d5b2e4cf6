"""Database module for SQLite persistence.

Provides:
- Database connection management and explicit transactions
- Schema initialization
- Repository functions for students, grades and attendance tables
"""

from schoolbook.db.database import get_db, get_db_path, init_db, transaction

__all__ = ["get_db", "get_db_path", "init_db", "transaction"]
