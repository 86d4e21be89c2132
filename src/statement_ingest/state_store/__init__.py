"""
State Store (SQLite-based).

Lightweight persistent DB for tracking:
- Uploaded statement files and their processing status
- Transactions accepted from each statement
"""

from .sqlite_store import (
    DEFAULT_MAX_FILE_SIZE,
    ProcessingStatus,
    StatementRecord,
    StateStore,
    TransactionRecord,
)

__all__ = [
    "DEFAULT_MAX_FILE_SIZE",
    "StateStore",
    "StatementRecord",
    "TransactionRecord",
    "ProcessingStatus",
]
