"""
Statement pipeline - one synchronous unit of work per document.

SourceDocument -> TextExtractor -> ExtractorRouter -> CandidateNormalizer
-> ExtractionResult
"""

import logging
from collections.abc import Iterable
from typing import Optional

from ..confidence import CandidateNormalizer
from ..config import Config
from ..errors import IngestError
from ..extractors import ExtractorRouter
from ..loaders import TextExtractor
from ..provider.service import ProviderService
from ..schemas.transaction import BatchResult, ExtractionResult, SourceDocument
from ..state_store import StateStore

logger = logging.getLogger(__name__)


class StatementPipeline:
    """
    Converts statement documents into normalized transaction candidates.

    Documents in a batch are processed sequentially. A failure on one
    document is recorded on its result and never stops the next one.
    """

    def __init__(self, config: Config, provider: Optional[ProviderService] = None):
        self.config = config
        self.text_extractor = TextExtractor(config.extraction)
        self.router = ExtractorRouter(config, provider)
        self.normalizer = CandidateNormalizer()

    def process_document(self, document: SourceDocument) -> ExtractionResult:
        """Process one document. Never raises."""
        try:
            text = self.text_extractor.extract(document)
            candidates, strategy = self.router.extract(text, document.id)
        except IngestError as e:
            logger.warning("Document %s failed: %s", document.id, e)
            return self.normalizer.failed(document.id, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error processing document {document.id}")
            return self.normalizer.failed(document.id, f"Unexpected error: {e}")

        result = self.normalizer.finalize(document.id, candidates, strategy)
        logger.info(
            "Document %s: %s via %s (%d transactions)",
            document.id,
            result.status.value,
            strategy,
            result.transaction_count,
        )
        return result

    def process_batch(self, documents: Iterable[SourceDocument]) -> BatchResult:
        """Process documents in order, collecting one result per document."""
        batch = BatchResult()
        for document in documents:
            batch.results.append(self.process_document(document))
        return batch

    def process_stored(self, store: StateStore, statement_ids: Iterable[int]) -> BatchResult:
        """
        Batch trigger for stored statements.

        Each statement is marked processing, run through the pipeline and
        saved with its terminal status. Unknown ids are reported as missing.
        """
        batch = BatchResult()
        for statement_id in statement_ids:
            document = store.load_document(statement_id)
            if document is None:
                logger.warning("Statement %s not found", statement_id)
                batch.missing.append(str(statement_id))
                continue

            store.mark_processing(statement_id)
            result = self.process_document(document)
            store.save_result(statement_id, result)
            batch.results.append(result)

        logger.info(
            "Processed %d statements: %d transactions, %d failed",
            len(batch.results),
            batch.total_transactions,
            len(batch.failed),
        )
        return batch

    def close(self) -> None:
        self.router.service.close()

    def __enter__(self) -> "StatementPipeline":
        return self

    def __exit__(self, *args) -> None:
        self.close()
