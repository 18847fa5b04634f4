"""Provider registry and the shared call path used by both engines."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum

from cadr.config.models import AnalysisConfig
from cadr.llm.base import LLMProvider
from cadr.llm.claude import ClaudeProvider
from cadr.llm.errors import (
    ProviderErrorKind,
    ResponseErrorKind,
    classify_provider_error,
    missing_key_message,
    provider_error_message,
)
from cadr.llm.gemini import GeminiProvider
from cadr.llm.models import ProviderCallOptions
from cadr.llm.openai_adapter import OpenAIProvider

logger = logging.getLogger(__name__)

# Rough chars-per-token ratio used to size prompts without a tokenizer.
CHARS_PER_TOKEN = 4
TOKEN_WARNING_THRESHOLD = 100_000

EMPTY_RESPONSE_MESSAGE = "No response content from LLM"


class ProviderName(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


def get_provider(name: ProviderName | str) -> LLMProvider:
    """Return the adapter for a configured provider name.

    Raises ValueError for an unrecognized name; that is a configuration
    error, not a runtime failure to be absorbed.
    """
    try:
        name = ProviderName(name)
    except ValueError:
        raise ValueError(
            f"Unsupported LLM provider: {name!r}. "
            f"Supported: {', '.join(p.value for p in ProviderName)}"
        ) from None

    match name:
        case ProviderName.OPENAI:
            return OpenAIProvider()
        case ProviderName.GEMINI:
            return GeminiProvider()
        case ProviderName.ANTHROPIC:
            return ClaudeProvider()


def estimate_tokens(text: str) -> int:
    return len(text) // CHARS_PER_TOKEN


@dataclass
class ProviderReply:
    """Outcome of one provider call: response text or a classified error."""

    text: str | None = None
    error: str | None = None
    kind: ProviderErrorKind | ResponseErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def call_provider(config: AnalysisConfig, prompt: str, operation: str) -> ProviderReply:
    """Send *prompt* to the configured provider under the configured timeout.

    Never raises for runtime failures: a missing key, any exception from
    the adapter, and an empty response all come back as ProviderReply.error.
    """
    api_key = os.environ.get(config.api_key_env)
    if not api_key:
        logger.warning("%s skipped: %s is not set", operation, config.api_key_env)
        return ProviderReply(
            error=missing_key_message(config), kind=ProviderErrorKind.MISSING_KEY
        )

    estimated = estimate_tokens(prompt)
    if estimated > TOKEN_WARNING_THRESHOLD:
        logger.warning(
            "%s prompt is large (~%d tokens, threshold %d); the request may fail",
            operation,
            estimated,
            TOKEN_WARNING_THRESHOLD,
        )

    provider = get_provider(config.provider)
    options = ProviderCallOptions(
        api_key=api_key,
        model=config.analysis_model,
        timeout_ms=config.timeout_seconds * 1000,
    )
    logger.info(
        "sending %s request to %s (model: %s, ~%d tokens)",
        operation,
        provider.name,
        config.analysis_model,
        estimated,
    )

    try:
        text = await provider.analyze(prompt, options)
    except Exception as e:
        kind = classify_provider_error(e)
        logger.warning("%s request failed (%s): %s", operation, kind.value, e)
        return ProviderReply(error=provider_error_message(kind, config, e), kind=kind)

    if not text or not text.strip():
        logger.warning("%s returned no content", operation)
        return ProviderReply(error=EMPTY_RESPONSE_MESSAGE, kind=ResponseErrorKind.EMPTY)
    return ProviderReply(text=text)
