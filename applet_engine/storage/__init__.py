"""Database models and storage layer for execution history."""

from .database import (
    Base,
    create_database_engine,
    get_database_engine,
    reset_database_engine,
    create_tables,
    drop_tables,
)
from .models import ExecutionLogModel
from .history import ExecutionHistoryStore

__all__ = [
    "Base",
    "create_database_engine",
    "get_database_engine",
    "reset_database_engine",
    "create_tables",
    "drop_tables",
    "ExecutionLogModel",
    "ExecutionHistoryStore",
]
