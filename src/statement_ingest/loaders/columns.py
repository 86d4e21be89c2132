"""
Column inference for tabular statements.

Maps arbitrary header names onto semantic roles and re-renders each row as a
canonical `date,description,amount,type` pseudo-CSV line.

Rules:
- For each role, the first header matching the first pattern (in order) wins.
- date/description/amount fall back to columns 1/2/3 when nothing matches.
- A debit + credit column pair takes precedence over a generic amount column;
  a non-numeric cell on one side counts as zero.
- A type column carrying debit/credit keywords corrects the sign of an
  ambiguous amount.
"""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..config import ColumnRolePatterns

logger = logging.getLogger(__name__)

DEBIT_KEYWORDS = re.compile(r"debit|expense|withdrawal", re.IGNORECASE)
CREDIT_KEYWORDS = re.compile(r"credit|income|deposit", re.IGNORECASE)

# Positional fallback, by role
POSITIONAL_ROLES = {"date": 0, "description": 1, "amount": 2}


@dataclass
class ColumnMapping:
    """Semantic role -> source column name."""

    date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = None
    debit: Optional[str] = None
    credit: Optional[str] = None
    type: Optional[str] = None

    @property
    def has_debit_credit_pair(self) -> bool:
        return bool(self.debit and self.credit)


def _first_match(headers: list[str], patterns: list[str]) -> Optional[str]:
    """Return the first header matching the earliest pattern."""
    for pattern in patterns:
        regex = re.compile(pattern, re.IGNORECASE)
        for header in headers:
            if regex.search(header.strip()):
                return header
    return None


def infer_columns(
    headers: list[str],
    patterns: Optional[ColumnRolePatterns] = None,
) -> ColumnMapping:
    """
    Infer the column mapping for a header row.

    Args:
        headers: Header names in file order
        patterns: Ordered role patterns (defaults from config)

    Returns:
        ColumnMapping (roles may be None)
    """
    patterns = patterns or ColumnRolePatterns()

    mapping = ColumnMapping(
        date=_first_match(headers, patterns.date),
        description=_first_match(headers, patterns.description),
        amount=_first_match(headers, patterns.amount),
        type=_first_match(headers, patterns.type),
        debit=_first_match(headers, patterns.debit),
        credit=_first_match(headers, patterns.credit),
    )

    for role, index in POSITIONAL_ROLES.items():
        if getattr(mapping, role) is None and len(headers) > index:
            setattr(mapping, role, headers[index])

    # A column cannot be both sides of the pair
    if mapping.debit and mapping.debit == mapping.credit:
        mapping.credit = None

    return mapping


def parse_amount_cell(value: object) -> Optional[Decimal]:
    """Parse a tabular amount cell ("$1,234.50", "-4.5", 12) into a Decimal."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    cleaned = str(value).strip().replace("$", "").replace(",", "").replace(" ", "")
    if not cleaned:
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def _cell(row: dict[str, str], column: Optional[str]) -> str:
    if not column:
        return ""
    value = row.get(column)
    return "" if value is None else str(value).strip()


def _clean_field(value: str) -> str:
    """Keep rendered fields free of the pseudo-CSV separator."""
    return " ".join(value.replace(",", " ").split())


def resolve_amount(row: dict[str, str], mapping: ColumnMapping) -> tuple[Optional[Decimal], str]:
    """
    Resolve the signed amount and type label for one row.

    Returns:
        (amount or None if unresolvable, type label)
    """
    type_label = _cell(row, mapping.type)

    if mapping.has_debit_credit_pair:
        debit_text = _cell(row, mapping.debit)
        credit_text = _cell(row, mapping.credit)
        debit = parse_amount_cell(debit_text) if debit_text else Decimal("0")
        credit = parse_amount_cell(credit_text) if credit_text else Decimal("0")
        if debit is None and credit is None:
            return None, type_label
        # Placeholders such as "-" or "N/A" count as zero
        debit = debit if debit is not None else Decimal("0")
        credit = credit if credit is not None else Decimal("0")

        if debit > 0:
            return -debit, type_label or "Debit"
        if credit > 0:
            return credit, type_label or "Credit"
        return Decimal("0"), type_label

    amount = parse_amount_cell(_cell(row, mapping.amount))
    if amount is None:
        return None, type_label

    if type_label:
        if DEBIT_KEYWORDS.search(type_label) and amount > 0:
            amount = -amount
        elif CREDIT_KEYWORDS.search(type_label) and amount < 0:
            amount = abs(amount)

    return amount, type_label


def render_row(row: dict[str, str], mapping: ColumnMapping) -> Optional[str]:
    """
    Render one row as a `date,description,amount,type` line.

    Returns:
        The line, or None when date, description or amount is missing
    """
    date_text = _clean_field(_cell(row, mapping.date))
    description = _clean_field(_cell(row, mapping.description))
    amount, type_label = resolve_amount(row, mapping)

    if not date_text or not description or amount is None:
        return None

    return f"{date_text},{description},{format(amount, 'f')},{_clean_field(type_label)}"


def render_rows(rows: list[dict[str, str]], mapping: ColumnMapping) -> list[str]:
    """Render all resolvable rows; unresolvable rows are dropped."""
    lines: list[str] = []
    dropped = 0
    for row in rows:
        line = render_row(row, mapping)
        if line is None:
            dropped += 1
            continue
        lines.append(line)

    if dropped:
        logger.debug("Dropped %d of %d rows without date, description or amount", dropped, len(rows))
    return lines
