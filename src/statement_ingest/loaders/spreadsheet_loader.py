"""
Spreadsheet statement loader (XLSX via openpyxl, legacy XLS via xlrd).

Only one worksheet is read (the first by default). The sheet becomes a 2-D
grid of strings, and each non-blank row is joined with commas into a
pseudo-CSV line. Headers are kept as-is; the line extractors skip them.
"""

import logging
import zipfile
from datetime import date, datetime, time
from decimal import Decimal
from io import BytesIO

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from ..errors import CorruptFileError, EmptyContentError, UnsupportedFormatError
from ..schemas.transaction import SourceDocument, SourceFormat
from .base import BaseLoader

logger = logging.getLogger(__name__)


def cell_to_text(value: object) -> str:
    """Render a spreadsheet cell value as text (blank cells -> "")."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")
    return str(value).strip()


def grid_to_text(grid: list[list[str]]) -> str:
    """Join each non-blank row of the grid with commas."""
    lines = [",".join(row) for row in grid if any(cell.strip() for cell in row)]
    return "\n".join(lines)


class SpreadsheetLoader(BaseLoader):
    """Reads one worksheet of an XLS/XLSX workbook into pseudo-CSV text."""

    def __init__(self, worksheet_index: int = 0):
        self.worksheet_index = worksheet_index

    @property
    def name(self) -> str:
        return "spreadsheet"

    @property
    def formats(self) -> tuple[SourceFormat, ...]:
        return (SourceFormat.XLS, SourceFormat.XLSX)

    def load(self, document: SourceDocument) -> str:
        if document.format == SourceFormat.XLS:
            grid = self._read_xls(document.content)
        else:
            grid = self._read_xlsx(document.content)

        text = grid_to_text(grid)
        if not text.strip():
            raise EmptyContentError("No data found in Excel file")

        logger.debug("Spreadsheet %s: %d rows", document.id, text.count("\n") + 1)
        return text

    def _read_xlsx(self, content: bytes) -> list[list[str]]:
        try:
            workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
            raise CorruptFileError(f"Failed to process Excel file: {e}") from e

        try:
            sheet_names = workbook.sheetnames
            if self.worksheet_index >= len(sheet_names):
                raise UnsupportedFormatError("No worksheets found in Excel file")

            worksheet = workbook[sheet_names[self.worksheet_index]]
            return [
                [cell_to_text(value) for value in row]
                for row in worksheet.iter_rows(values_only=True)
            ]
        finally:
            workbook.close()

    def _read_xls(self, content: bytes) -> list[list[str]]:
        try:
            book = xlrd.open_workbook(file_contents=content)
        except (xlrd.XLRDError, CompDocError, OSError, ValueError) as e:
            raise CorruptFileError(f"Failed to process Excel file: {e}") from e

        if self.worksheet_index >= book.nsheets:
            raise UnsupportedFormatError("No worksheets found in Excel file")

        sheet = book.sheet_by_index(self.worksheet_index)
        grid: list[list[str]] = []
        for row_idx in range(sheet.nrows):
            row: list[str] = []
            for cell in sheet.row(row_idx):
                if cell.ctype == xlrd.XL_CELL_DATE:
                    row.append(cell_to_text(xlrd.xldate_as_datetime(cell.value, book.datemode)))
                elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                    row.append("")
                else:
                    row.append(cell_to_text(cell.value))
            grid.append(row)
        return grid
