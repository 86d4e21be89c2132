"""
Base extractor interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..schemas.transaction import TransactionCandidate


class BaseExtractor(ABC):
    """
    Base class for transaction extractors.

    Each extractor implements one strategy:
    - Provider-assisted structured extraction
    - Regex pattern cascade
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Extractor name for logging and provenance."""
        pass

    @abstractmethod
    def can_extract(self, text: str) -> bool:
        """
        Check if this extractor should be attempted.

        Args:
            text: Normalized statement text

        Returns:
            True if this extractor should be attempted
        """
        pass

    @abstractmethod
    def extract(
        self, text: str, document_ref: Optional[str] = None
    ) -> list[TransactionCandidate]:
        """
        Extract transaction candidates from normalized text.

        Args:
            text: Normalized statement text
            document_ref: Source document id stamped on every candidate

        Returns:
            Candidates in statement order
        """
        pass
