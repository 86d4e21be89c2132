"""
Statement text loaders.

Provides:
- TextExtractor: Chooses the loader for a declared format
- PDF, TXT, CSV and spreadsheet loaders
- Column inference for tabular statements
"""

from .base import BaseLoader
from .columns import ColumnMapping, infer_columns, parse_amount_cell, render_row
from .csv_loader import CSVLoader
from .pdf_loader import PDFLoader
from .router import TextExtractor
from .spreadsheet_loader import SpreadsheetLoader
from .text_loader import TextLoader

__all__ = [
    "TextExtractor",
    "BaseLoader",
    "CSVLoader",
    "PDFLoader",
    "SpreadsheetLoader",
    "TextLoader",
    "ColumnMapping",
    "infer_columns",
    "parse_amount_cell",
    "render_row",
]
