"""
CSV statement loader.

Rows are parsed tolerantly: unparsable lines are skipped instead of aborting
the file, and rows wider than the header are kept. Surviving rows go through
column inference and are re-rendered as canonical pseudo-CSV lines.
"""

import csv
import io
import logging
from typing import Optional

from ..config import ColumnRolePatterns
from ..errors import EmptyContentError
from ..schemas.transaction import SourceDocument, SourceFormat
from .base import BaseLoader, decode_text
from .columns import infer_columns, render_rows

logger = logging.getLogger(__name__)


def read_csv_rows(text: str) -> tuple[list[str], list[dict[str, str]]]:
    """
    Parse CSV text into a header row and row dictionaries.

    Blank rows and rows the csv module rejects are skipped. Short rows are
    padded with empty strings. Values beyond the header are kept under
    positional keys (`_3`, `_4`, ...); empty ones are dropped, so exports that
    end every data row with a comma parse like any other.

    Returns:
        (headers, rows)
    """
    reader = csv.reader(io.StringIO(text))
    headers: list[str] = []
    rows: list[dict[str, str]] = []
    skipped = 0

    while True:
        try:
            values = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            skipped += 1
            logger.debug("Skipping unparsable CSV line %d: %s", reader.line_num, e)
            continue

        if not any(v.strip() for v in values):
            continue

        if not headers:
            headers = [v.strip() for v in values]
            continue

        padded = values + [""] * (len(headers) - len(values))
        row = {h: v.strip() for h, v in zip(headers, padded)}
        for index in range(len(headers), len(values)):
            if values[index].strip():
                row[f"_{index}"] = values[index].strip()
        rows.append(row)

    if skipped:
        logger.info("Skipped %d malformed CSV lines", skipped)
    return headers, rows


class CSVLoader(BaseLoader):
    """Turns a CSV export into canonical `date,description,amount,type` lines."""

    def __init__(self, patterns: Optional[ColumnRolePatterns] = None):
        self.patterns = patterns or ColumnRolePatterns()

    @property
    def name(self) -> str:
        return "csv"

    @property
    def formats(self) -> tuple[SourceFormat, ...]:
        return (SourceFormat.CSV,)

    def load(self, document: SourceDocument) -> str:
        headers, rows = read_csv_rows(decode_text(document.content))
        if not rows:
            raise EmptyContentError("No valid data found in CSV file")

        mapping = infer_columns(headers, self.patterns)
        logger.info(
            "CSV columns detected: date=%s description=%s amount=%s type=%s debit=%s credit=%s",
            mapping.date,
            mapping.description,
            mapping.amount,
            mapping.type,
            mapping.debit,
            mapping.credit,
        )

        lines = render_rows(rows, mapping)
        if not lines:
            raise EmptyContentError("No valid transaction data could be extracted from CSV")

        text = "\n".join(lines) + "\n"
        logger.debug("Formatted CSV text length: %d", len(text))
        return text
