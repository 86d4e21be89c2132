"""
Pattern extractor - deterministic regex fallback.

Used when the provider path is unavailable or fails. Pure: the same text
always yields the same candidates, and nothing here raises. Unparseable
lines are skipped.

Line matchers are tried in priority order; the first match wins:
1. Pseudo-CSV: date,description,amount[,type]
2. Date, description, amount separated by commas or tabs
3. Date, description, amount separated by whitespace
4. Same as 3, found anywhere in the line
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from ..classification import categorize_description, extract_merchant
from ..config import ExtractionConfig
from ..schemas.transaction import TransactionCandidate, TransactionType
from .base import BaseExtractor

logger = logging.getLogger(__name__)

DATE_TOKEN = r"\d{1,2}/\d{1,2}/\d{4}|\d{4}-\d{2}-\d{2}|\d{2}-\d{2}-\d{4}"
AMOUNT_TOKEN = r"[-+]?\$?\d[\d,]*\.?\d*"

PSEUDO_CSV_RE = re.compile(r"^([^,]+),([^,]+),([-+]?\d*\.?\d+),?(.*)$")
SEPARATED_RE = re.compile(
    rf"^({DATE_TOKEN})\s*[,\t]\s*([^,\t]+?)\s*[,\t]\s*({AMOUNT_TOKEN})"
)
SPACED_RE = re.compile(rf"^({DATE_TOKEN})\s+(.+?)\s+({AMOUNT_TOKEN})$")
TRAILING_RE = re.compile(rf"({DATE_TOKEN})\s+(.+?)\s+({AMOUNT_TOKEN})\s*$")

# (pattern, (year, month, day) group positions)
DATE_FORMATS: tuple[tuple[re.Pattern[str], tuple[int, int, int]], ...] = (
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), (1, 2, 3)),  # YYYY-MM-DD
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), (3, 1, 2)),  # MM/DD/YYYY
    (re.compile(r"^(\d{2})-(\d{2})-(\d{4})$"), (3, 2, 1)),  # DD-MM-YYYY
)

MIN_YEAR = 1900
MAX_YEAR = 2100

INCOME_HINTS = ("credit", "deposit")


@dataclass(frozen=True)
class LineMatch:
    """Raw fields captured from one statement line."""

    matcher: str
    date_text: str
    description: str
    amount_text: str
    type_hint: Optional[str] = None


def match_pseudo_csv(line: str) -> Optional[LineMatch]:
    m = PSEUDO_CSV_RE.match(line)
    if not m:
        return None
    return LineMatch("pseudo_csv", m.group(1), m.group(2), m.group(3), m.group(4) or None)


def match_separated(line: str) -> Optional[LineMatch]:
    m = SEPARATED_RE.match(line)
    if not m:
        return None
    return LineMatch("separated", m.group(1), m.group(2), m.group(3))


def match_spaced(line: str) -> Optional[LineMatch]:
    m = SPACED_RE.match(line)
    if not m:
        return None
    return LineMatch("spaced", m.group(1), m.group(2), m.group(3))


def match_trailing(line: str) -> Optional[LineMatch]:
    m = TRAILING_RE.search(line)
    if not m:
        return None
    return LineMatch("trailing", m.group(1), m.group(2), m.group(3))


LINE_MATCHERS: tuple[Callable[[str], Optional[LineMatch]], ...] = (
    match_pseudo_csv,
    match_separated,
    match_spaced,
    match_trailing,
)


def match_line(line: str) -> Optional[LineMatch]:
    """Return the first matcher's result for a line, or None."""
    for matcher in LINE_MATCHERS:
        found = matcher(line)
        if found:
            return found
    return None


def parse_statement_date(value: str) -> Optional[date]:
    """
    Parse YYYY-MM-DD, MM/DD/YYYY (or M/D/YYYY) and DD-MM-YYYY dates.

    Components outside year 1900-2100, month 1-12, day 1-31 are rejected, as
    are impossible calendar dates such as 02/30/2024.
    """
    value = value.strip()
    for pattern, (y, m, d) in DATE_FORMATS:
        match = pattern.match(value)
        if not match:
            continue
        year, month, day = int(match.group(y)), int(match.group(m)), int(match.group(d))
        if not (MIN_YEAR <= year <= MAX_YEAR and 1 <= month <= 12 and 1 <= day <= 31):
            continue
        try:
            return date(year, month, day)
        except ValueError:
            continue
    return None


def parse_amount(value: str) -> Optional[Decimal]:
    """Parse an amount token, ignoring $ and thousands separators."""
    cleaned = value.replace("$", "").replace(",", "").strip()
    if not cleaned:
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def clean_description(value: str) -> str:
    return value.strip().replace('"', "").replace(",", "")


def infer_type(amount: Decimal, type_hint: Optional[str]) -> TransactionType:
    """Income for credit/deposit hints or non-negative amounts, else expense."""
    hint = (type_hint or "").strip().lower()
    if any(token in hint for token in INCOME_HINTS) or amount >= 0:
        return TransactionType.INCOME
    return TransactionType.EXPENSE


class PatternExtractor(BaseExtractor):
    """Regex cascade extractor. Never raises; worst case is an empty list."""

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()

    @property
    def name(self) -> str:
        return "pattern"

    def can_extract(self, text: str) -> bool:
        return True

    def extract(
        self, text: str, document_ref: Optional[str] = None
    ) -> list[TransactionCandidate]:
        candidates: list[TransactionCandidate] = []

        for raw_line in text.split("\n"):
            line = raw_line.strip()
            if len(line) < self.config.min_line_length:
                continue

            found = match_line(line)
            if found is None:
                continue

            candidate = self._build(found, document_ref)
            if candidate is None:
                logger.debug("Dropped %s match: %r", found.matcher, line)
                continue
            candidates.append(candidate)

        logger.info("Pattern extraction found %d transactions", len(candidates))
        return candidates

    def _build(
        self, found: LineMatch, document_ref: Optional[str]
    ) -> Optional[TransactionCandidate]:
        tx_date = parse_statement_date(found.date_text)
        if tx_date is None:
            return None

        description = clean_description(found.description)
        if len(description) < self.config.min_description_length:
            return None

        amount = parse_amount(found.amount_text)
        if amount is None:
            return None

        return TransactionCandidate(
            date=tx_date,
            description=description,
            amount=amount,
            type=infer_type(amount, found.type_hint),
            category=categorize_description(description),
            merchant=extract_merchant(description),
            confidence=self.config.fallback_confidence,
            source_document_ref=document_ref,
            user_modified=False,
        )
