"""Classification of provider failures into user-facing messages."""

from __future__ import annotations

import re
from enum import Enum

from cadr.config.models import AnalysisConfig
from cadr.llm.base import TIMEOUT_CODE

_CONTEXT_LENGTH_PATTERN = re.compile(
    r"context.length|maximum context|context window|too many tokens|token limit"
    r"|exceeds? the maximum|prompt is too long",
    re.IGNORECASE,
)
_NETWORK_CODES = {"ENOTFOUND", "ECONNREFUSED", "ECONNRESET", "EAI_AGAIN", "ENETUNREACH"}


class ProviderErrorKind(str, Enum):
    MISSING_KEY = "missing_key"
    AUTH_FAILED = "auth_failed"
    RATE_LIMITED = "rate_limited"
    CONTEXT_TOO_LARGE = "context_too_large"
    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    UNCLASSIFIED = "unclassified"


class ResponseErrorKind(str, Enum):
    EMPTY = "empty"
    MALFORMED = "malformed"
    SCHEMA_INVALID = "schema_invalid"
    MISSING_REASON = "missing_reason"


def truncate(text: str, limit: int = 200) -> str:
    """Bound text embedded in errors and logs."""
    return text if len(text) <= limit else text[:limit] + "..."


def _status_of(exc: BaseException) -> int | None:
    for attr in ("status", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def _code_of(exc: BaseException) -> str | None:
    code = getattr(exc, "code", None)
    return code if isinstance(code, str) else None


def classify_provider_error(exc: BaseException) -> ProviderErrorKind:
    """Map an exception raised by a provider call to a ProviderErrorKind."""
    status = _status_of(exc)
    code = _code_of(exc)
    message = str(exc)
    lowered = message.lower()

    if status == 401:
        return ProviderErrorKind.AUTH_FAILED
    if status == 400 and _CONTEXT_LENGTH_PATTERN.search(message):
        return ProviderErrorKind.CONTEXT_TOO_LARGE
    if status == 429:
        return ProviderErrorKind.RATE_LIMITED
    if (
        code == TIMEOUT_CODE
        or isinstance(exc, TimeoutError)
        or "timeout" in lowered
        or "timed out" in lowered
    ):
        return ProviderErrorKind.TIMEOUT
    if (
        code in _NETWORK_CODES
        or isinstance(exc, ConnectionError)
        or any(c.lower() in lowered for c in _NETWORK_CODES)
        or "network" in lowered
    ):
        return ProviderErrorKind.NETWORK_UNREACHABLE
    return ProviderErrorKind.UNCLASSIFIED


def missing_key_message(config: AnalysisConfig) -> str:
    return (
        f"API key not found in environment variable {config.api_key_env}.\n"
        f"Set it before running analysis:\n"
        f'   export {config.api_key_env}="your-api-key-here"'
    )


def provider_error_message(
    kind: ProviderErrorKind,
    config: AnalysisConfig,
    exc: BaseException | None = None,
) -> str:
    """Human-readable, actionable message for a classified provider failure."""
    match kind:
        case ProviderErrorKind.MISSING_KEY:
            return missing_key_message(config)
        case ProviderErrorKind.AUTH_FAILED:
            return (
                f"Authentication failed (401) for {config.provider}.\n"
                f"Check that {config.api_key_env} contains a valid API key."
            )
        case ProviderErrorKind.CONTEXT_TOO_LARGE:
            return (
                f"The changes are too large for the context window of {config.analysis_model}.\n"
                "Try one of:\n"
                "   1. Analyze fewer files: stage a subset and run `cadr analyze --staged`\n"
                "   2. Add generated or vendored files to ignore_patterns in cadr.yaml\n"
                "   3. Switch analysis_model to a model with a larger context window"
            )
        case ProviderErrorKind.RATE_LIMITED:
            return (
                f"Rate limit exceeded (429) for {config.provider}.\n"
                "Wait a moment and try again, or check your plan's quota."
            )
        case ProviderErrorKind.TIMEOUT:
            return (
                f"Request timed out after {config.timeout_seconds}s.\n"
                "Increase timeout_seconds in cadr.yaml (max 60) or analyze fewer changes."
            )
        case ProviderErrorKind.NETWORK_UNREACHABLE:
            return (
                f"Network error: could not reach the {config.provider} API.\n"
                "Check your internet connection and proxy settings."
            )
    detail = f": {truncate(str(exc))}" if exc is not None else ""
    return f"{config.provider} API error{detail}"
