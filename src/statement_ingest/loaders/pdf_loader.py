"""
PDF statement loader.

Reads the embedded text layer with pdfplumber. Scanned statements without a
text layer come out empty; there is no OCR.
"""

import logging
from io import BytesIO

import pdfplumber

from ..errors import CorruptFileError, EmptyContentError
from ..schemas.transaction import SourceDocument, SourceFormat
from .base import BaseLoader

logger = logging.getLogger(__name__)


class PDFLoader(BaseLoader):
    """Extracts the text of every page, joined with newlines."""

    @property
    def name(self) -> str:
        return "pdf"

    @property
    def formats(self) -> tuple[SourceFormat, ...]:
        return (SourceFormat.PDF,)

    def load(self, document: SourceDocument) -> str:
        pages_text: list[str] = []
        try:
            with pdfplumber.open(BytesIO(document.content)) as pdf:
                for page_num, page in enumerate(pdf.pages, start=1):
                    text = page.extract_text() or ""
                    pages_text.append(text)
                    logger.debug("PDF %s: %d chars from page %d", document.id, len(text), page_num)
        except Exception as e:
            # pdfminer raises a wide range of parser errors for damaged files
            raise CorruptFileError(f"Failed to read PDF file: {e}") from e

        text = "\n".join(pages_text)
        if not text.strip():
            raise EmptyContentError("No text could be extracted from PDF file")
        return text
