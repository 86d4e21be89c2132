"""
Structured extractor - provider-assisted extraction.

The provider returns a JSON array; each element is validated on its own and
invalid elements are dropped without affecting the rest. The provider's type
is only a hint: the final type is always recomputed from the amount sign.
"""

import logging
import re
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..errors import ValidationDropped
from ..provider.service import ProviderService
from ..schemas.categories import coerce_category
from ..schemas.transaction import TransactionCandidate, TransactionType
from .base import BaseExtractor

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

STRUCTURED_CONFIDENCE = 0.85


def resolve_type(amount: Decimal, hint: object) -> TransactionType:
    """
    Derive the transaction type from amount sign plus provider hint.

    - amount > 0: income, unless the hint says transfer
    - amount <= 0 and hint says transfer: transfer
    - otherwise: expense
    """
    is_transfer = isinstance(hint, str) and hint.strip().lower() == TransactionType.TRANSFER.value
    if amount > 0:
        return TransactionType.TRANSFER if is_transfer else TransactionType.INCOME
    if is_transfer:
        return TransactionType.TRANSFER
    return TransactionType.EXPENSE


def _validated_amount(value: Any) -> Decimal:
    # bool is an int subclass; strings are not accepted as numbers
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValidationDropped(f"Transaction has invalid amount: {value!r}")
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    if not amount.is_finite():
        raise ValidationDropped(f"Transaction has non-finite amount: {value!r}")
    return amount


def _validated_date(value: Any) -> date:
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        raise ValidationDropped(f"Transaction has invalid date format: {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationDropped(f"Transaction has impossible date: {value!r}") from None


def build_candidate(
    item: Any,
    document_ref: Optional[str] = None,
    confidence: float = STRUCTURED_CONFIDENCE,
) -> TransactionCandidate:
    """
    Validate one provider array element and build a candidate.

    Raises:
        ValidationDropped: If the element is unusable
    """
    if not isinstance(item, dict):
        raise ValidationDropped("Transaction is not an object", raw=item)

    if not item.get("date") or not item.get("description") or item.get("amount") is None:
        raise ValidationDropped("Transaction missing required fields", raw=item)

    tx_date = _validated_date(item["date"])
    amount = _validated_amount(item["amount"])

    description = item["description"]
    if not isinstance(description, str) or not description.strip():
        raise ValidationDropped("Transaction has empty description", raw=item)

    merchant = item.get("merchant")
    return TransactionCandidate(
        date=tx_date,
        description=description.strip(),
        amount=amount,
        type=resolve_type(amount, item.get("type")),
        category=coerce_category(item.get("category")),
        merchant=merchant.strip() if isinstance(merchant, str) else "",
        confidence=confidence,
        source_document_ref=document_ref,
        user_modified=False,
    )


class StructuredExtractor(BaseExtractor):
    """
    Extract transactions through the provider service.

    Raises ProviderUnavailableError / ProviderError / ProviderTimeoutError
    from the service; the router decides what happens next.
    """

    def __init__(self, service: ProviderService, confidence: float = STRUCTURED_CONFIDENCE):
        self.service = service
        self.confidence = confidence

    @property
    def name(self) -> str:
        return "structured"

    def can_extract(self, text: str) -> bool:
        return self.service.is_available and bool(text and text.strip())

    def extract(
        self, text: str, document_ref: Optional[str] = None
    ) -> list[TransactionCandidate]:
        items = self.service.extract_transactions(text)

        candidates: list[TransactionCandidate] = []
        for item in items:
            try:
                candidates.append(build_candidate(item, document_ref, self.confidence))
            except ValidationDropped as e:
                logger.debug("Dropped provider element: %s", e.reason)

        logger.info(
            "Extracted %d valid transactions from %d provider elements",
            len(candidates),
            len(items),
        )
        return candidates
