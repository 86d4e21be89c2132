"""Provider service for structured transaction extraction.

Talks to an OpenAI-compatible chat-completions endpoint over httpx.
Features:
- One request per document with the fixed extraction prompt
- Fixed temperature and max output length
- Statement text truncated to a fixed character budget
- Recovery cascade for near-JSON responses (see json_repair)

Privacy constraints:
- Never log statement text or raw responses at INFO level
- Only lengths and status codes are logged
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from statement_ingest.config import ProviderConfig
from statement_ingest.errors import (
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from statement_ingest.provider.json_repair import decode_transaction_array
from statement_ingest.provider.prompts import ExtractionPrompt

logger = logging.getLogger(__name__)


class ProviderService:
    """Structured extraction via a hosted language model.

    Without a configured API key the service is unavailable and every call
    raises ProviderUnavailableError before any network access.
    """

    def __init__(self, config: ProviderConfig) -> None:
        """Initialize the provider service.

        Args:
            config: Provider configuration.
        """
        self.config = config
        self._prompt = ExtractionPrompt()

        headers = {"Content-Type": "application/json"}
        if config.has_credential():
            headers["Authorization"] = f"Bearer {config.api_key}"

        # Explicit timeouts:
        # - connect: 10 seconds for initial connection
        # - read: full deadline for waiting on the completion
        # - write: 30 seconds for sending the statement text
        # - pool: 10 seconds for getting a connection from the pool
        self._client = httpx.Client(
            timeout=httpx.Timeout(
                connect=10.0,
                read=float(config.timeout_seconds),
                write=30.0,
                pool=10.0,
            ),
            headers=headers,
        )

    @property
    def is_available(self) -> bool:
        """Check if a credential is configured."""
        return self.config.has_credential()

    @property
    def prompt_version(self) -> str:
        return self._prompt.version

    def truncate(self, text: str) -> str:
        """Apply the fixed per-document character budget."""
        return text[: self.config.max_input_chars]

    def build_payload(self, text: str) -> dict[str, Any]:
        """Build the chat-completions request body for one document."""
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": self._prompt.system_prompt},
                {"role": "user", "content": self._prompt.format_user_message(self.truncate(text))},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    def complete(self, text: str) -> str:
        """Send one extraction request and return the raw completion text.

        Raises:
            ProviderUnavailableError: No credential configured.
            ProviderTimeoutError: The request exceeded its deadline.
            ProviderError: Quota, rate limit, HTTP or transport failure, or a
                malformed response envelope.
        """
        if not self.is_available:
            raise ProviderUnavailableError("Provider API key is not configured")

        url = f"{self.config.base_url}/chat/completions"
        payload = self.build_payload(text)
        logger.debug(
            "Calling provider model %s (%d chars of statement text)",
            self.config.model,
            min(len(text), self.config.max_input_chars),
        )

        try:
            response = self._client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"Provider request timed out after {self.config.timeout_seconds}s"
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            code = self._error_code(e.response)
            logger.warning("Provider API error %s (code=%s)", status, code)
            raise ProviderError(
                f"Provider API error {status}", status_code=status, code=code
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(f"Provider request failed: {e}") from e
        except ValueError as e:
            raise ProviderError("Provider response is not valid JSON") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("Provider response has no completion content") from e

        if not isinstance(content, str):
            raise ProviderError("Provider completion content is not text")

        logger.debug("Provider %s returned %d chars", self.config.model, len(content))
        return content

    def extract_transactions(self, text: str) -> list[Any]:
        """Extract the raw transaction array for one statement.

        Returns:
            Decoded JSON array elements (not yet validated).

        Raises:
            ProviderUnavailableError, ProviderTimeoutError, ProviderError
        """
        content = self.complete(text)
        outcome = decode_transaction_array(content)
        if not outcome.ok:
            raise ProviderError(f"Unrecoverable provider response: {outcome.error}")

        if outcome.stage > 1:
            logger.info("Provider response recovered at decode stage %d", outcome.stage)
        return outcome.items

    @staticmethod
    def _error_code(response: httpx.Response) -> str | None:
        """Read the error code from an OpenAI-style error body, if any."""
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            code = body["error"].get("code") or body["error"].get("type")
            return str(code) if code else None
        return None

    def close(self) -> None:
        """Close HTTP client."""
        self._client.close()

    def __enter__(self) -> ProviderService:
        """Enter context manager."""
        return self

    def __exit__(self, *args) -> None:
        """Exit context manager."""
        self.close()
