"""Tests for the provider service, prompt and JSON recovery cascade."""

import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

import httpx
import pytest

from statement_ingest.config import ProviderConfig
from statement_ingest.errors import (
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from statement_ingest.provider import (
    DecodeStatus,
    ExtractionPrompt,
    ProviderService,
    decode_transaction_array,
)
from statement_ingest.provider.json_repair import (
    parse_array_span,
    parse_direct,
    parse_repaired_span,
    strip_code_fences,
)
from statement_ingest.schemas.categories import PROVIDER_CATEGORIES

ITEM = {"date": "2024-01-15", "description": "Coffee", "amount": -4.5, "type": "expense"}


def _completion(content: str) -> MagicMock:
    response = MagicMock()
    response.json.return_value = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    return response


def _status_error(status: int, body: dict) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://provider.test/v1/chat/completions")
    response = httpx.Response(status, json=body, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n[{"a": 1}]\n```') == '[{"a": 1}]'

    def test_plain_fence(self):
        assert strip_code_fences("```\n[]\n```") == "[]"

    def test_no_fence(self):
        assert strip_code_fences("  [1, 2]  ") == "[1, 2]"


class TestDecodeStages:
    """Tests for the individual cascade stages."""

    def test_direct_parse(self):
        outcome = parse_direct(json.dumps([ITEM]))

        assert outcome.ok
        assert outcome.stage == 1
        assert outcome.items[0]["description"] == "Coffee"

    def test_direct_parse_uses_decimal(self):
        outcome = parse_direct('[{"amount": -4.50}]')

        assert outcome.items[0]["amount"] == Decimal("-4.50")

    def test_direct_parse_object_needs_repair(self):
        outcome = parse_direct('{"transactions": []}')

        assert outcome.status == DecodeStatus.NEEDS_REPAIR
        assert "Expected a JSON array" in outcome.error

    def test_array_span(self):
        outcome = parse_array_span('Here are the transactions: [{"a": 1}] Hope this helps!')

        assert outcome.ok
        assert outcome.stage == 2
        assert outcome.items == [{"a": 1}]

    def test_array_span_missing(self):
        outcome = parse_array_span("No transactions found.")

        assert outcome.status == DecodeStatus.NEEDS_REPAIR
        assert outcome.error == "No JSON array found"

    def test_repaired_span(self):
        outcome = parse_repaired_span('[{"a": 1,}, {"b": 2},]')

        assert outcome.ok
        assert outcome.stage == 3
        assert outcome.items == [{"a": 1}, {"b": 2}]


class TestDecodeTransactionArray:
    """Tests for the full recovery cascade."""

    def test_clean_array(self):
        outcome = decode_transaction_array(json.dumps([ITEM, ITEM]))

        assert outcome.ok
        assert outcome.stage == 1
        assert len(outcome.items) == 2

    def test_fenced_array_with_trailing_comma(self):
        """A fenced array with a trailing comma before ] recovers at stage 3."""
        raw = '```json\n[\n  {"date": "2024-01-15", "description": "Coffee", "amount": -4.5},\n]\n```'

        outcome = decode_transaction_array(raw)

        assert outcome.ok
        assert outcome.stage == 3
        assert outcome.items[0]["description"] == "Coffee"

    def test_prose_wrapped_array(self):
        outcome = decode_transaction_array(f"Sure! Here you go:\n{json.dumps([ITEM])}\nThanks")

        assert outcome.ok
        assert outcome.stage == 2

    def test_empty_response(self):
        outcome = decode_transaction_array("   ")

        assert outcome.status == DecodeStatus.UNRECOVERABLE
        assert outcome.error == "Empty response"

    def test_none_response(self):
        assert decode_transaction_array(None).status == DecodeStatus.UNRECOVERABLE

    def test_unrecoverable(self):
        outcome = decode_transaction_array("[{date: 2024-01-15, description: Coffee}]")

        assert outcome.status == DecodeStatus.UNRECOVERABLE
        assert outcome.stage == 3
        assert outcome.items == []

    def test_empty_array_is_ok(self):
        outcome = decode_transaction_array("[]")

        assert outcome.ok
        assert outcome.items == []


class TestExtractionPrompt:
    def test_prompt_version_set(self):
        assert ExtractionPrompt().version == "v1.0"

    def test_system_prompt_lists_vocabulary(self):
        prompt = ExtractionPrompt()

        for category in PROVIDER_CATEGORIES:
            assert f'"{category}"' in prompt.system_prompt
        assert "YYYY-MM-DD" in prompt.system_prompt
        assert "Return ONLY the JSON array" in prompt.system_prompt

    def test_format_user_message(self):
        message = ExtractionPrompt().format_user_message("2024-01-01 Coffee -3.50")

        assert message.startswith("Extract transactions from this bank statement:")
        assert message.endswith("2024-01-01 Coffee -3.50")


class TestProviderService:
    """Tests for ProviderService with a mocked httpx client."""

    def test_unavailable_without_credential(self):
        service = ProviderService(ProviderConfig(api_key=None))

        assert service.is_available is False

    def test_blank_credential_is_unavailable(self):
        service = ProviderService(ProviderConfig(api_key="   "))

        assert service.is_available is False

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_unavailable_never_calls_provider(self, mock_client_class: MagicMock):
        mock_client = MagicMock()
        mock_client_class.return_value = mock_client
        service = ProviderService(ProviderConfig(api_key=None))

        with pytest.raises(ProviderUnavailableError):
            service.extract_transactions("2024-01-01 Coffee -3.50")

        mock_client.post.assert_not_called()

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_client_configured_with_timeouts_and_auth(
        self, mock_client_class: MagicMock, provider_config: ProviderConfig
    ):
        ProviderService(provider_config)

        kwargs = mock_client_class.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["timeout"].read == 120.0
        assert kwargs["timeout"].connect == 10.0

    def test_build_payload(self, provider_config: ProviderConfig):
        service = ProviderService(provider_config)

        payload = service.build_payload("statement text")

        assert payload["model"] == "gpt-3.5-turbo"
        assert payload["temperature"] == 0.1
        assert payload["max_tokens"] == 2000
        assert payload["messages"][0]["role"] == "system"
        assert payload["messages"][1]["content"].endswith("statement text")

    def test_truncates_to_character_budget(self):
        service = ProviderService(ProviderConfig(api_key="sk-test", max_input_chars=20))
        text = "x" * 50

        payload = service.build_payload(text)

        assert payload["messages"][1]["content"].endswith("\n\n" + "x" * 20)

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_extract_transactions(self, mock_client_class: MagicMock, provider_config):
        mock_client = MagicMock()
        mock_client.post.return_value = _completion(json.dumps([ITEM]))
        mock_client_class.return_value = mock_client

        service = ProviderService(provider_config)
        items = service.extract_transactions("2024-01-15 Coffee -4.50")

        assert items[0]["description"] == "Coffee"
        url = mock_client.post.call_args.args[0]
        assert url == "https://provider.test/v1/chat/completions"
        assert mock_client.post.call_count == 1

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_repaired_response(self, mock_client_class: MagicMock, provider_config):
        mock_client = MagicMock()
        mock_client.post.return_value = _completion('```json\n[{"date": "2024-01-15"},]\n```')
        mock_client_class.return_value = mock_client

        items = ProviderService(provider_config).extract_transactions("text")

        assert items == [{"date": "2024-01-15"}]

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_unrecoverable_response(self, mock_client_class: MagicMock, provider_config):
        mock_client = MagicMock()
        mock_client.post.return_value = _completion("I could not find any transactions.")
        mock_client_class.return_value = mock_client

        with pytest.raises(ProviderError, match="Unrecoverable"):
            ProviderService(provider_config).extract_transactions("text")

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_quota_error(self, mock_client_class: MagicMock, provider_config):
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = _status_error(
            429, {"error": {"message": "quota", "type": "insufficient_quota", "code": "insufficient_quota"}}
        )
        mock_client = MagicMock()
        mock_client.post.return_value = mock_response
        mock_client_class.return_value = mock_client

        with pytest.raises(ProviderError) as exc_info:
            ProviderService(provider_config).complete("text")

        assert exc_info.value.status_code == 429
        assert exc_info.value.code == "insufficient_quota"
        assert exc_info.value.is_quota_error

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_server_error(self, mock_client_class: MagicMock, provider_config):
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = _status_error(500, {"error": {"type": "server_error"}})
        mock_client = MagicMock()
        mock_client.post.return_value = mock_response
        mock_client_class.return_value = mock_client

        with pytest.raises(ProviderError) as exc_info:
            ProviderService(provider_config).complete("text")

        assert exc_info.value.status_code == 500
        assert not exc_info.value.is_quota_error

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_timeout(self, mock_client_class: MagicMock, provider_config):
        mock_client = MagicMock()
        mock_client.post.side_effect = httpx.ReadTimeout("timed out")
        mock_client_class.return_value = mock_client

        with pytest.raises(ProviderTimeoutError):
            ProviderService(provider_config).complete("text")

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_connection_error(self, mock_client_class: MagicMock, provider_config):
        mock_client = MagicMock()
        mock_client.post.side_effect = httpx.ConnectError("connection refused")
        mock_client_class.return_value = mock_client

        with pytest.raises(ProviderError, match="request failed"):
            ProviderService(provider_config).complete("text")

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_malformed_envelope(self, mock_client_class: MagicMock, provider_config):
        mock_response = MagicMock()
        mock_response.json.return_value = {"choices": []}
        mock_client = MagicMock()
        mock_client.post.return_value = mock_response
        mock_client_class.return_value = mock_client

        with pytest.raises(ProviderError, match="no completion content"):
            ProviderService(provider_config).complete("text")

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_non_json_body(self, mock_client_class: MagicMock, provider_config):
        mock_response = MagicMock()
        mock_response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
        mock_client = MagicMock()
        mock_client.post.return_value = mock_response
        mock_client_class.return_value = mock_client

        with pytest.raises(ProviderError, match="not valid JSON"):
            ProviderService(provider_config).complete("text")

    @patch("statement_ingest.provider.service.httpx.Client")
    def test_context_manager_closes_client(self, mock_client_class: MagicMock, provider_config):
        mock_client = MagicMock()
        mock_client_class.return_value = mock_client

        with ProviderService(provider_config):
            pass

        mock_client.close.assert_called_once()
