"""
Text extractor - chooses the loader for a document's declared format.
"""

import logging
from typing import Optional

from ..config import ExtractionConfig
from ..errors import EmptyContentError, UnsupportedFormatError
from ..schemas.transaction import SourceDocument, SourceFormat
from .base import BaseLoader
from .csv_loader import CSVLoader
from .pdf_loader import PDFLoader
from .spreadsheet_loader import SpreadsheetLoader
from .text_loader import TextLoader

logger = logging.getLogger(__name__)


class TextExtractor:
    """
    Converts a SourceDocument into one normalized text document.

    Dispatches on the declared format:
    - pdf: embedded text layer
    - txt: raw text
    - csv: column inference + canonical pseudo-CSV
    - xls/xlsx: first worksheet as pseudo-CSV

    Whatever the format, a result shorter than min_text_length (trimmed)
    is rejected with EmptyContentError.
    """

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()
        loaders: list[BaseLoader] = [
            PDFLoader(),
            TextLoader(),
            CSVLoader(self.config.columns),
            SpreadsheetLoader(self.config.worksheet_index),
        ]
        self._by_format: dict[SourceFormat, BaseLoader] = {}
        for loader in loaders:
            for fmt in loader.formats:
                self._by_format[fmt] = loader

    def loader_for(self, fmt: object) -> BaseLoader:
        """Return the loader for a format tag or raise UnsupportedFormatError."""
        try:
            source_format = SourceFormat(fmt)
        except ValueError:
            raise UnsupportedFormatError(f"Unsupported file type: {fmt}") from None

        loader = self._by_format.get(source_format)
        if loader is None:
            raise UnsupportedFormatError(f"Unsupported file type: {fmt}")
        return loader

    def extract(self, document: SourceDocument) -> str:
        """
        Extract normalized text from a document.

        Raises:
            UnsupportedFormatError, EmptyContentError, CorruptFileError
        """
        loader = self.loader_for(document.format)
        text = loader.load(document)

        if len(text.strip()) < self.config.min_text_length:
            raise EmptyContentError("Insufficient text content for processing")

        logger.debug("Loader %s produced %d chars for %s", loader.name, len(text), document.id)
        return text
