"""
Plain text statement loader.
"""

from ..errors import EmptyContentError
from ..schemas.transaction import SourceDocument, SourceFormat
from .base import BaseLoader, decode_text


class TextLoader(BaseLoader):
    """Reads .txt statements as UTF-8 text."""

    @property
    def name(self) -> str:
        return "text"

    @property
    def formats(self) -> tuple[SourceFormat, ...]:
        return (SourceFormat.TXT,)

    def load(self, document: SourceDocument) -> str:
        text = decode_text(document.content)
        if not text.strip():
            raise EmptyContentError("Text file is empty or could not be read")
        return text
