"""
Base loader interface.
"""

from abc import ABC, abstractmethod

from ..schemas.transaction import SourceDocument, SourceFormat


def decode_text(content: bytes) -> str:
    """Decode statement bytes as UTF-8, tolerating a BOM and bad bytes."""
    return content.decode("utf-8-sig", errors="replace")


class BaseLoader(ABC):
    """
    Base class for all text loaders.

    Each loader turns one family of file formats into a single text
    document. Loaders raise DocumentError subclasses, never return None.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Loader name for logging."""
        pass

    @property
    @abstractmethod
    def formats(self) -> tuple[SourceFormat, ...]:
        """Formats this loader handles."""
        pass

    @abstractmethod
    def load(self, document: SourceDocument) -> str:
        """
        Convert a source document into text.

        Args:
            document: Uploaded statement file

        Returns:
            Pseudo-CSV or prose text

        Raises:
            EmptyContentError, CorruptFileError, UnsupportedFormatError
        """
        pass
