"""
Canonical transaction candidate and result objects (SSOT).

Every extraction path produces TransactionCandidate objects; every document
produces exactly one ExtractionResult. No other module may invent another
transaction schema.
"""

import mimetypes
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional


class SourceFormat(str, Enum):
    """Declared format of an uploaded statement file."""

    PDF = "pdf"
    CSV = "csv"
    TXT = "txt"
    XLS = "xls"
    XLSX = "xlsx"

    @classmethod
    def from_filename(cls, filename: str) -> "SourceFormat":
        """Derive the format tag from a file extension.

        Raises:
            ValueError: If the extension is not a supported format.
        """
        suffix = Path(filename).suffix.lower().lstrip(".")
        return cls(suffix)


# MIME types accepted at upload, per format
MIME_TYPES = {
    SourceFormat.PDF: "application/pdf",
    SourceFormat.CSV: "text/csv",
    SourceFormat.TXT: "text/plain",
    SourceFormat.XLS: "application/vnd.ms-excel",
    SourceFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class ExtractionStatus(str, Enum):
    """Terminal status of one document's extraction."""

    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceDocument:
    """An uploaded statement file. Immutable once stored."""

    id: str
    format: SourceFormat
    content: bytes
    filename: str = ""
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Path, document_id: Optional[str] = None) -> "SourceDocument":
        """Load a statement file from disk, deriving format and MIME type."""
        fmt = SourceFormat.from_filename(path.name)
        mime = MIME_TYPES.get(fmt) or mimetypes.guess_type(path.name)[0] or ""
        return cls(
            id=document_id or path.name,
            format=fmt,
            content=path.read_bytes(),
            filename=path.name,
            mime_type=mime,
        )


@dataclass
class TransactionCandidate:
    """
    An extracted, not-yet-persisted transaction.

    amount is signed: positive = inflow, negative = outflow.
    category is always a value of the provider vocabulary (see categories.py).
    """

    date: date
    description: str
    amount: Decimal
    type: TransactionType
    category: str = "other"
    merchant: str = ""
    confidence: float = 0.0
    source_document_ref: Optional[str] = None
    user_modified: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": str(self.amount),
            "type": self.type.value,
            "category": self.category,
            "merchant": self.merchant,
            "confidence": self.confidence,
            "source_document_ref": self.source_document_ref,
            "user_modified": self.user_modified,
        }


@dataclass
class ExtractionResult:
    """Candidates plus terminal status for one source document."""

    document_ref: str
    status: ExtractionStatus
    candidates: list[TransactionCandidate] = field(default_factory=list)
    strategy: Optional[str] = None  # e.g., "structured", "pattern"
    error: Optional[str] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None

    @property
    def transaction_count(self) -> int:
        return len(self.candidates)

    @property
    def succeeded(self) -> bool:
        return self.status == ExtractionStatus.COMPLETED

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "document_ref": self.document_ref,
            "status": self.status.value,
            "strategy": self.strategy,
            "error": self.error,
            "transaction_count": self.transaction_count,
            "period_start": self.period_start.isoformat() if self.period_start else None,
            "period_end": self.period_end.isoformat() if self.period_end else None,
            "candidates": [c.to_dict() for c in self.candidates],
        }


@dataclass
class BatchResult:
    """Outcome of processing a list of documents sequentially."""

    results: list[ExtractionResult] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)  # Unknown document ids

    @property
    def total_transactions(self) -> int:
        """Accepted transactions across all completed documents."""
        return sum(r.transaction_count for r in self.results if r.succeeded)

    @property
    def failed(self) -> list[ExtractionResult]:
        return [r for r in self.results if not r.succeeded]
