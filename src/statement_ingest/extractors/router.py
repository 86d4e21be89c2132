"""
Extractor router - primary/fallback strategy chain.

Order:
1. StructuredExtractor (provider), when a credential is configured
2. PatternExtractor, on ProviderUnavailableError or ProviderError

A provider call that exceeds its deadline is abandoned and raises
ProviderTimeoutError; the document fails instead of falling back.
"""

import logging
import queue
import threading
from typing import Optional

from ..config import Config
from ..errors import ProviderError, ProviderTimeoutError, ProviderUnavailableError
from ..provider.service import ProviderService
from ..schemas.transaction import TransactionCandidate
from .base import BaseExtractor
from .pattern_extractor import PatternExtractor
from .structured_extractor import StructuredExtractor

logger = logging.getLogger(__name__)


class ExtractorRouter:
    """
    Routes normalized text through the extraction strategies.

    Holds no per-document state: every call reads only its own text.
    """

    def __init__(self, config: Config, service: Optional[ProviderService] = None):
        self.config = config
        self.service = service or ProviderService(config.provider)
        self.primary: BaseExtractor = StructuredExtractor(
            self.service, confidence=config.extraction.structured_confidence
        )
        self.fallback: BaseExtractor = PatternExtractor(config.extraction)

    @property
    def deadline(self) -> float:
        return float(self.config.provider.timeout_seconds)

    def extract(
        self, text: str, document_ref: Optional[str] = None
    ) -> tuple[list[TransactionCandidate], str]:
        """
        Extract candidates, returning them with the name of the strategy used.

        Raises:
            ProviderTimeoutError: The provider call was abandoned
        """
        if not self.primary.can_extract(text):
            logger.info("Provider not configured, using pattern extraction")
            return self.fallback.extract(text, document_ref), self.fallback.name

        try:
            return self._extract_with_deadline(text, document_ref), self.primary.name
        except ProviderUnavailableError:
            logger.info("Provider unavailable, using pattern extraction")
        except ProviderError as e:
            if e.is_quota_error:
                logger.warning("Provider quota exceeded, using pattern extraction")
            else:
                logger.warning("Provider extraction failed (%s), using pattern extraction", e)

        return self.fallback.extract(text, document_ref), self.fallback.name

    def _extract_with_deadline(
        self, text: str, document_ref: Optional[str]
    ) -> list[TransactionCandidate]:
        """Run the primary strategy on a daemon thread bounded by the deadline.

        An abandoned call keeps running until its own transport timeout, but
        the daemon thread never holds up interpreter exit and its result is
        discarded.
        """
        outcome: queue.Queue = queue.Queue(maxsize=1)

        def run() -> None:
            try:
                outcome.put((True, self.primary.extract(text, document_ref)))
            except Exception as e:
                outcome.put((False, e))

        worker = threading.Thread(
            target=run, name=f"provider-call-{document_ref or 'text'}", daemon=True
        )
        worker.start()

        try:
            succeeded, value = outcome.get(timeout=self.deadline)
        except queue.Empty:
            raise ProviderTimeoutError(
                f"Provider call abandoned after {self.deadline:.0f}s"
            ) from None

        if not succeeded:
            raise value
        return value
