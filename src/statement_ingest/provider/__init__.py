"""Provider module for structured transaction extraction.

Sends statement text to a hosted language model and recovers a JSON
transaction array from its (often slightly malformed) reply.
"""

from statement_ingest.provider.json_repair import (
    DecodeOutcome,
    DecodeStatus,
    decode_transaction_array,
)
from statement_ingest.provider.prompts import ExtractionPrompt
from statement_ingest.provider.service import ProviderService

__all__ = [
    "ProviderService",
    "ExtractionPrompt",
    "DecodeOutcome",
    "DecodeStatus",
    "decode_transaction_array",
]
