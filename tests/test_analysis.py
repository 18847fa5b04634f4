"""Tests for the analysis engine and the shared provider call path."""

import asyncio
import json
import time
from unittest.mock import patch

import pytest

from cadr.config.models import AnalysisConfig
from cadr.llm import AnalysisRequest, LLMError, analyze_changes, parse_analysis_payload
from cadr.llm.analysis import ResponseParseError, extract_json_text, strip_code_fence
from cadr.llm.base import race_with_timeout
from cadr.llm.errors import ProviderErrorKind, ResponseErrorKind
from cadr.llm.gateway import EMPTY_RESPONSE_MESSAGE, call_provider, estimate_tokens
from cadr.llm.models import ProviderCallOptions


@pytest.fixture
def request_():
    return AnalysisRequest(
        file_paths=["src/db.py"],
        diff_content="+import psycopg",
        analysis_prompt="Is this significant?",
    )


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------


class TestParseAnalysisPayload:
    def test_plain_json(self):
        result = parse_analysis_payload('{"is_significant": true, "reason": "New DB"}')
        assert result.is_significant
        assert result.reason == "New DB"
        assert result.confidence is None

    def test_fenced_json(self):
        raw = '```json\n{"is_significant": false, "reason": ""}\n```'
        assert parse_analysis_payload(raw).is_significant is False

    def test_json_inside_prose(self):
        raw = 'Sure! Here is my verdict: {"is_significant": true, "reason": "Adds Kafka"} Hope it helps.'
        assert parse_analysis_payload(raw).reason == "Adds Kafka"

    def test_keeps_valid_confidence(self):
        raw = '{"is_significant": true, "reason": "r", "confidence": 0.85}'
        assert parse_analysis_payload(raw).confidence == 0.85

    @pytest.mark.parametrize("confidence", ["0.9", 1.7, -0.1, True])
    def test_drops_bad_confidence(self, confidence):
        raw = json.dumps({"is_significant": True, "reason": "r", "confidence": confidence})
        assert parse_analysis_payload(raw).confidence is None

    def test_not_json(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_analysis_payload("I think this is significant.")
        assert exc_info.value.kind is ResponseErrorKind.MALFORMED
        assert "Failed to parse LLM response as JSON" in str(exc_info.value)
        assert "I think this is significant." in str(exc_info.value)

    def test_wrong_types(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_analysis_payload('{"is_significant": "yes", "reason": "r"}')
        assert exc_info.value.kind is ResponseErrorKind.SCHEMA_INVALID

    def test_array_payload(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_analysis_payload("[1, 2]")
        assert exc_info.value.kind is ResponseErrorKind.SCHEMA_INVALID

    def test_significant_without_reason(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_analysis_payload('{"is_significant": true, "reason": "   "}')
        assert exc_info.value.kind is ResponseErrorKind.MISSING_REASON
        assert "no reason" in str(exc_info.value)

    def test_strip_code_fence_leaves_unfenced_text(self):
        assert strip_code_fence("  plain  ") == "plain"

    def test_extract_json_prefers_whole_object(self):
        assert extract_json_text('{"a": 1}') == '{"a": 1}'


# ---------------------------------------------------------------------------
# call_provider
# ---------------------------------------------------------------------------


class TestCallProvider:
    @pytest.mark.asyncio
    async def test_missing_key_makes_no_call(self, sample_config, no_api_key, mock_llm_provider):
        with patch("cadr.llm.gateway.get_provider", return_value=mock_llm_provider) as factory:
            reply = await call_provider(sample_config, "prompt", "analysis")

        assert not reply.ok
        assert reply.kind is ProviderErrorKind.MISSING_KEY
        assert "CADR_TEST_API_KEY" in reply.error
        factory.assert_not_called()
        mock_llm_provider.analyze.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_passes_timeout_in_milliseconds(self, sample_config, api_key, mock_llm_provider):
        with patch("cadr.llm.gateway.get_provider", return_value=mock_llm_provider):
            reply = await call_provider(sample_config, "prompt", "analysis")

        assert reply.ok
        prompt, options = mock_llm_provider.analyze.call_args.args
        assert prompt == "prompt"
        assert isinstance(options, ProviderCallOptions)
        assert options.timeout_ms == 15000
        assert options.api_key == "sk-test-123"
        assert options.model == "gpt-4"

    @pytest.mark.asyncio
    async def test_whitespace_reply_is_empty(self, sample_config, api_key, mock_llm_provider):
        mock_llm_provider.analyze.return_value = "  \n"
        with patch("cadr.llm.gateway.get_provider", return_value=mock_llm_provider):
            reply = await call_provider(sample_config, "prompt", "analysis")
        assert reply.error == EMPTY_RESPONSE_MESSAGE
        assert reply.kind is ResponseErrorKind.EMPTY

    @pytest.mark.asyncio
    async def test_provider_exception_is_classified(self, sample_config, api_key, mock_llm_provider):
        mock_llm_provider.analyze.side_effect = LLMError(
            "openai", "analyze", RuntimeError("unauthorized"), status=401
        )
        with patch("cadr.llm.gateway.get_provider", return_value=mock_llm_provider):
            reply = await call_provider(sample_config, "prompt", "analysis")
        assert reply.kind is ProviderErrorKind.AUTH_FAILED
        assert "Authentication failed" in reply.error

    @pytest.mark.asyncio
    async def test_large_prompt_warns(self, sample_config, api_key, mock_llm_provider, caplog):
        prompt = "x" * 400_004
        assert estimate_tokens(prompt) > 100_000
        with patch("cadr.llm.gateway.get_provider", return_value=mock_llm_provider):
            with caplog.at_level("WARNING", logger="cadr.llm.gateway"):
                reply = await call_provider(sample_config, prompt, "analysis")
        assert reply.ok
        assert "prompt is large" in caplog.text


# ---------------------------------------------------------------------------
# analyze_changes
# ---------------------------------------------------------------------------


class TestAnalyzeChanges:
    @pytest.mark.asyncio
    async def test_significant(self, sample_config, api_key, mock_llm_provider, request_):
        with patch("cadr.llm.gateway.get_provider", return_value=mock_llm_provider):
            response = await analyze_changes(sample_config, request_)

        assert response.error is None
        assert response.result.is_significant
        assert response.result.reason == "Adds PostgreSQL driver"
        assert response.result.confidence == 0.9
        assert response.result.timestamp
        mock_llm_provider.analyze.assert_awaited_once()
        assert mock_llm_provider.analyze.call_args.args[0] == "Is this significant?"

    @pytest.mark.asyncio
    async def test_malformed_reply_is_error(self, sample_config, api_key, mock_llm_provider, request_):
        mock_llm_provider.analyze.return_value = "definitely significant"
        with patch("cadr.llm.gateway.get_provider", return_value=mock_llm_provider):
            response = await analyze_changes(sample_config, request_)
        assert response.result is None
        assert "Failed to parse LLM response as JSON" in response.error

    @pytest.mark.asyncio
    async def test_missing_key(self, sample_config, no_api_key, request_):
        response = await analyze_changes(sample_config, request_)
        assert response.result is None
        assert response.error.startswith("API key not found")

    @pytest.mark.asyncio
    async def test_timeout_returns_promptly(self, api_key, request_):
        """A provider that never answers is cut off near the configured timeout."""
        config = AnalysisConfig(
            provider="openai",
            analysis_model="gpt-4",
            api_key_env="CADR_TEST_API_KEY",
            timeout_seconds=1,
        )

        class SlowProvider:
            name = "openai"

            async def analyze(self, prompt, options):
                return await race_with_timeout(asyncio.sleep(30), options.timeout_seconds)

        start = time.monotonic()
        with patch("cadr.llm.gateway.get_provider", return_value=SlowProvider()):
            response = await analyze_changes(config, request_)
        elapsed = time.monotonic() - start

        assert elapsed < 3
        assert response.result is None
        assert "timed out after 1s" in response.error
