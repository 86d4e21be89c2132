"""
SQLite-based state store implementation.

Tables:
- statements: Uploaded statement files and their processing status
- transactions: Accepted transaction candidates per statement
"""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from ..schemas.transaction import (
    MIME_TYPES,
    ExtractionResult,
    SourceDocument,
    SourceFormat,
)

# Largest statement file accepted at upload
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

ALLOWED_MIME_TYPES = frozenset(MIME_TYPES.values())


class ProcessingStatus(str, Enum):
    """Processing status of an uploaded statement."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class StatementRecord:
    """Record of an uploaded statement (without file content)."""

    id: int
    filename: str
    file_type: str
    file_size: int
    mime_type: str | None
    uploaded_at: str  # ISO timestamp
    processing_status: ProcessingStatus
    transaction_count: int
    period_start: str | None
    period_end: str | None
    error_message: str | None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "StatementRecord":
        """Create from database row."""
        return cls(
            id=row["id"],
            filename=row["filename"],
            file_type=row["file_type"],
            file_size=row["file_size"],
            mime_type=row["mime_type"],
            uploaded_at=row["uploaded_at"],
            processing_status=ProcessingStatus(row["processing_status"]),
            transaction_count=row["transaction_count"],
            period_start=row["period_start"],
            period_end=row["period_end"],
            error_message=row["error_message"],
        )


@dataclass
class TransactionRecord:
    """Record of a stored transaction."""

    id: int
    statement_id: int
    date: str
    description: str
    amount: Decimal
    type: str
    category: str
    merchant: str
    confidence: float
    user_modified: bool
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "TransactionRecord":
        """Create from database row."""
        return cls(
            id=row["id"],
            statement_id=row["statement_id"],
            date=row["date"],
            description=row["description"],
            amount=Decimal(row["amount"]),
            type=row["type"],
            category=row["category"],
            merchant=row["merchant"] or "",
            confidence=row["confidence"],
            user_modified=bool(row["user_modified"]),
            created_at=row["created_at"],
        )


class StateStore:
    """
    SQLite-based persistence for uploaded statements and their transactions.

    The pipeline itself never writes here; callers hand ExtractionResults to
    save_result, which replaces a statement's transactions atomically.
    """

    def __init__(self, db_path: Path | str, max_file_size: int = DEFAULT_MAX_FILE_SIZE):
        """
        Initialize state store.

        Args:
            db_path: Path to SQLite database file
            max_file_size: Upload size limit in bytes
        """
        self.db_path = Path(db_path)
        self.max_file_size = max_file_size
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS statements (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    filename TEXT NOT NULL,
                    file_type TEXT NOT NULL,
                    file_size INTEGER NOT NULL,
                    mime_type TEXT,
                    content BLOB NOT NULL,
                    uploaded_at TEXT NOT NULL,
                    processing_status TEXT NOT NULL DEFAULT 'pending',
                    transaction_count INTEGER NOT NULL DEFAULT 0,
                    period_start TEXT,
                    period_end TEXT,
                    error_message TEXT
                )
            """
            )

            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    statement_id INTEGER NOT NULL,
                    date TEXT NOT NULL,
                    description TEXT NOT NULL,
                    amount TEXT NOT NULL,  -- Decimal as text
                    type TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT 'other',
                    merchant TEXT,
                    confidence REAL NOT NULL,
                    user_modified INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (statement_id) REFERENCES statements(id) ON DELETE CASCADE
                )
            """
            )

            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_transactions_statement "
                "ON transactions(statement_id)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_statements_status "
                "ON statements(processing_status)"
            )

    # === Statement Methods ===

    def add_statement(
        self,
        filename: str,
        content: bytes,
        file_type: SourceFormat | str | None = None,
        mime_type: str | None = None,
    ) -> int:
        """
        Register an uploaded statement file.

        Returns:
            The new statement id

        Raises:
            ValueError: If the file type or MIME type is not supported, or the
                content exceeds max_file_size
        """
        fmt = SourceFormat(file_type) if file_type else SourceFormat.from_filename(filename)
        if mime_type and mime_type not in ALLOWED_MIME_TYPES:
            raise ValueError(
                f"Invalid file type {mime_type!r}. "
                "Only PDF, CSV, TXT, XLS, and XLSX files are allowed."
            )
        if len(content) > self.max_file_size:
            raise ValueError(
                f"File {filename} is {len(content)} bytes, over the "
                f"{self.max_file_size} byte limit"
            )
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO statements
                (filename, file_type, file_size, mime_type, content, uploaded_at,
                 processing_status)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    filename,
                    fmt.value,
                    len(content),
                    mime_type or MIME_TYPES[fmt],
                    content,
                    _now(),
                    ProcessingStatus.PENDING.value,
                ),
            )
            return cursor.lastrowid

    def get_statement(self, statement_id: int) -> StatementRecord | None:
        """Get statement metadata by id."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM statements WHERE id = ?", (statement_id,)
            ).fetchone()
            return StatementRecord.from_row(row) if row else None

    def load_document(self, statement_id: int) -> SourceDocument | None:
        """Load a stored statement as a SourceDocument for the pipeline."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT id, filename, file_type, mime_type, content FROM statements WHERE id = ?",
                (statement_id,),
            ).fetchone()
            if not row:
                return None
            return SourceDocument(
                id=str(row["id"]),
                format=SourceFormat(row["file_type"]),
                content=bytes(row["content"]),
                filename=row["filename"],
                mime_type=row["mime_type"] or "",
            )

    def list_statements(
        self, status: ProcessingStatus | None = None
    ) -> list[StatementRecord]:
        """List statements, newest first, optionally filtered by status."""
        with self._transaction() as conn:
            if status is None:
                rows = conn.execute(
                    "SELECT * FROM statements ORDER BY uploaded_at DESC, id DESC"
                ).fetchall()
            else:
                rows = conn.execute(
                    """
                    SELECT * FROM statements WHERE processing_status = ?
                    ORDER BY uploaded_at DESC, id DESC
                """,
                    (ProcessingStatus(status).value,),
                ).fetchall()
            return [StatementRecord.from_row(row) for row in rows]

    def mark_processing(self, statement_id: int) -> None:
        """Mark a statement as being processed."""
        with self._transaction() as conn:
            conn.execute(
                "UPDATE statements SET processing_status = ?, error_message = NULL WHERE id = ?",
                (ProcessingStatus.PROCESSING.value, statement_id),
            )

    def save_result(self, statement_id: int, result: ExtractionResult) -> None:
        """
        Persist one document's extraction result.

        Replaces any previously stored transactions for the statement and
        records status, transaction count and statement period.
        """
        now = _now()
        status = ProcessingStatus.COMPLETED if result.succeeded else ProcessingStatus.FAILED

        with self._transaction() as conn:
            conn.execute("DELETE FROM transactions WHERE statement_id = ?", (statement_id,))
            conn.executemany(
                """
                INSERT INTO transactions
                (statement_id, date, description, amount, type, category, merchant,
                 confidence, user_modified, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                [
                    (
                        statement_id,
                        c.date.isoformat(),
                        c.description,
                        str(c.amount),
                        c.type.value,
                        c.category,
                        c.merchant,
                        c.confidence,
                        1 if c.user_modified else 0,
                        now,
                    )
                    for c in result.candidates
                ],
            )
            conn.execute(
                """
                UPDATE statements
                SET processing_status = ?, transaction_count = ?, period_start = ?,
                    period_end = ?, error_message = ?
                WHERE id = ?
            """,
                (
                    status.value,
                    result.transaction_count,
                    result.period_start.isoformat() if result.period_start else None,
                    result.period_end.isoformat() if result.period_end else None,
                    result.error,
                    statement_id,
                ),
            )

    # === Transaction Methods ===

    def list_transactions(self, statement_id: int | None = None) -> list[TransactionRecord]:
        """List stored transactions, newest date first."""
        with self._transaction() as conn:
            if statement_id is None:
                rows = conn.execute(
                    "SELECT * FROM transactions ORDER BY date DESC, id ASC"
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM transactions WHERE statement_id = ? ORDER BY date DESC, id ASC",
                    (statement_id,),
                ).fetchall()
            return [TransactionRecord.from_row(row) for row in rows]

    def get_stats(self) -> dict[str, Any]:
        """Get pipeline statistics."""
        with self._transaction() as conn:
            statements = conn.execute("SELECT COUNT(*) as count FROM statements").fetchone()
            by_status = {
                row["processing_status"]: row["count"]
                for row in conn.execute(
                    """
                    SELECT processing_status, COUNT(*) as count
                    FROM statements GROUP BY processing_status
                """
                ).fetchall()
            }
            transactions = conn.execute("SELECT COUNT(*) as count FROM transactions").fetchone()

            return {
                "statements_total": statements["count"] if statements else 0,
                "statements_pending": by_status.get(ProcessingStatus.PENDING.value, 0),
                "statements_completed": by_status.get(ProcessingStatus.COMPLETED.value, 0),
                "statements_failed": by_status.get(ProcessingStatus.FAILED.value, 0),
                "transactions_total": transactions["count"] if transactions else 0,
            }
