"""
Error taxonomy for the ingestion pipeline.

Document-level errors are caught at the document boundary and recorded as a
failed result. Provider errors are routed to the fallback extractor, except
timeouts, which fail the document.
"""

from typing import Optional


class IngestError(Exception):
    """Base class for all pipeline errors."""

    pass


class DocumentError(IngestError):
    """A source document could not be turned into text."""

    pass


class UnsupportedFormatError(DocumentError):
    """Declared format is not supported, or the file has no usable sheet."""

    pass


class EmptyContentError(DocumentError):
    """Extracted text is empty or too short to process."""

    pass


class CorruptFileError(DocumentError):
    """The file could not be parsed in its declared format."""

    pass


class ProviderUnavailableError(IngestError):
    """No provider credential is configured."""

    pass


class ProviderError(IngestError):
    """The provider call failed or returned unrecoverable content."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code

    @property
    def is_quota_error(self) -> bool:
        """True for rate-limit and quota responses."""
        return self.status_code == 429 or self.code in ("insufficient_quota", "rate_limit_exceeded")


class ProviderTimeoutError(IngestError):
    """The provider call exceeded its deadline and was abandoned."""

    pass


class ValidationDropped(IngestError):
    """A single candidate was rejected. Never fatal."""

    def __init__(self, reason: str, raw: object = None):
        super().__init__(reason)
        self.reason = reason
        self.raw = raw
