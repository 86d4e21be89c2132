"""
SSOT (Single Source of Truth) schemas for the pipeline.

These canonical schemas are the ONLY models used across all modules.
"""

from .categories import (
    DEFAULT_CATEGORY,
    DISPLAY_CATEGORIES,
    PROVIDER_CATEGORIES,
    coerce_category,
    from_display_category,
    is_known_category,
    to_display_category,
)
from .transaction import (
    MIME_TYPES,
    BatchResult,
    ExtractionResult,
    ExtractionStatus,
    SourceDocument,
    SourceFormat,
    TransactionCandidate,
    TransactionType,
)

__all__ = [
    "DEFAULT_CATEGORY",
    "DISPLAY_CATEGORIES",
    "PROVIDER_CATEGORIES",
    "coerce_category",
    "from_display_category",
    "is_known_category",
    "to_display_category",
    "MIME_TYPES",
    "BatchResult",
    "ExtractionResult",
    "ExtractionStatus",
    "SourceDocument",
    "SourceFormat",
    "TransactionCandidate",
    "TransactionType",
]
