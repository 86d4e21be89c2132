"""
Candidate normalization - the last gate before candidates leave the pipeline.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from ..schemas.categories import DEFAULT_CATEGORY, coerce_category
from ..schemas.transaction import (
    ExtractionResult,
    ExtractionStatus,
    TransactionCandidate,
    TransactionType,
)

logger = logging.getLogger(__name__)

NO_CANDIDATES_ERROR = "No transactions could be extracted from the document"


@dataclass
class ConfidenceBounds:
    """Range every candidate confidence is clamped into."""

    minimum: float = 0.0
    maximum: float = 1.0

    def clamp(self, value: float) -> float:
        return max(self.minimum, min(self.maximum, value))


class CandidateNormalizer:
    """
    Enforces the output invariants for candidates from either path.

    - amount is a finite Decimal
    - type is one of income/expense/transfer (never re-derived here)
    - description is non-empty, date is a calendar date
    - category is a known value, defaulting to "other"
    - confidence is clamped to [0, 1]

    Candidates that cannot satisfy these are dropped. A document with no
    surviving candidates is failed, even when extraction itself succeeded.
    """

    def __init__(self, bounds: Optional[ConfidenceBounds] = None):
        self.bounds = bounds or ConfidenceBounds()

    def normalize(self, candidate: TransactionCandidate) -> Optional[TransactionCandidate]:
        """Return a normalized copy of a candidate, or None if it is nonsense."""
        amount = candidate.amount
        if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
            return None
        amount = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        if not amount.is_finite():
            return None

        if not isinstance(candidate.type, TransactionType):
            return None
        if not isinstance(candidate.date, date):
            return None

        description = (candidate.description or "").strip()
        if not description:
            return None

        return replace(
            candidate,
            amount=amount,
            description=description,
            category=coerce_category(candidate.category) or DEFAULT_CATEGORY,
            merchant=(candidate.merchant or "").strip(),
            confidence=self.bounds.clamp(float(candidate.confidence)),
        )

    def finalize(
        self,
        document_ref: str,
        candidates: list[TransactionCandidate],
        strategy: Optional[str] = None,
    ) -> ExtractionResult:
        """Build the ExtractionResult for one document."""
        accepted = []
        for candidate in candidates:
            normalized = self.normalize(candidate)
            if normalized is None:
                logger.debug("Rejected candidate from %s: %r", strategy, candidate.description)
                continue
            accepted.append(normalized)

        dropped = len(candidates) - len(accepted)
        if dropped:
            logger.info("Normalization dropped %d of %d candidates", dropped, len(candidates))

        if not accepted:
            return ExtractionResult(
                document_ref=document_ref,
                status=ExtractionStatus.FAILED,
                strategy=strategy,
                error=NO_CANDIDATES_ERROR,
            )

        dates = [c.date for c in accepted]
        return ExtractionResult(
            document_ref=document_ref,
            status=ExtractionStatus.COMPLETED,
            candidates=accepted,
            strategy=strategy,
            period_start=min(dates),
            period_end=max(dates),
        )

    def failed(self, document_ref: str, error: str, strategy: Optional[str] = None) -> ExtractionResult:
        """Build a failed result; no partial candidates are kept."""
        return ExtractionResult(
            document_ref=document_ref,
            status=ExtractionStatus.FAILED,
            strategy=strategy,
            error=error,
        )
