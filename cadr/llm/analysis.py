"""AnalysisEngine: asks the model whether a change is architecturally significant."""

from __future__ import annotations

import json
import logging
import re

from cadr.config.models import AnalysisConfig
from cadr.llm.errors import ResponseErrorKind, truncate
from cadr.llm.gateway import call_provider
from cadr.llm.models import AnalysisRequest, AnalysisResponse, AnalysisResult

logger = logging.getLogger(__name__)

_WHOLE_FENCE = re.compile(r"^```[\w-]*[ \t]*\n(.*?)\n?```$", re.DOTALL)
# Greedy: first "{" to last "}". Known to misread prose containing several
# brace-delimited fragments; kept because stricter parsing rejects real outputs.
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

SCHEMA_HINT = '{"is_significant": boolean, "reason": string}'


class ResponseParseError(ValueError):
    def __init__(self, kind: ResponseErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)


def strip_code_fence(text: str) -> str:
    """Remove one code fence wrapping the entire payload, if present."""
    stripped = text.strip()
    match = _WHOLE_FENCE.match(stripped)
    return match.group(1).strip() if match else stripped


def extract_json_text(raw: str) -> str:
    """Best-effort isolation of the JSON object inside a model reply."""
    text = strip_code_fence(raw)
    if text.startswith("{") and text.endswith("}"):
        return text
    match = _JSON_OBJECT.search(text)
    return match.group(0) if match else text


def parse_analysis_payload(raw: str) -> AnalysisResult:
    """Parse and validate a model reply into an AnalysisResult.

    Raises ResponseParseError describing what was wrong with the reply.
    """
    try:
        payload = json.loads(extract_json_text(raw))
    except json.JSONDecodeError as e:
        raise ResponseParseError(
            ResponseErrorKind.MALFORMED,
            f"Failed to parse LLM response as JSON ({e.msg}). "
            f"Response excerpt: {truncate(raw.strip())}",
        ) from e

    if not isinstance(payload, dict):
        raise ResponseParseError(
            ResponseErrorKind.SCHEMA_INVALID,
            f"Invalid response format from LLM: expected {SCHEMA_HINT}",
        )

    is_significant = payload.get("is_significant")
    reason = payload.get("reason")
    if not isinstance(is_significant, bool) or not isinstance(reason, str):
        raise ResponseParseError(
            ResponseErrorKind.SCHEMA_INVALID,
            f"Invalid response format from LLM: expected {SCHEMA_HINT}",
        )
    if is_significant and not reason.strip():
        raise ResponseParseError(
            ResponseErrorKind.MISSING_REASON,
            "Invalid response from LLM: change marked significant but no reason was given",
        )

    confidence = payload.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        confidence = None
    elif not 0.0 <= confidence <= 1.0:
        logger.debug("dropping out-of-range confidence %r", confidence)
        confidence = None

    return AnalysisResult(
        is_significant=is_significant,
        reason=reason.strip(),
        confidence=confidence,
    )


async def analyze_changes(config: AnalysisConfig, request: AnalysisRequest) -> AnalysisResponse:
    """Run the significance analysis for one change set. Never raises."""
    reply = await call_provider(config, request.analysis_prompt, "analysis")
    if not reply.ok:
        return AnalysisResponse(error=reply.error)

    try:
        result = parse_analysis_payload(reply.text)
    except ResponseParseError as e:
        logger.warning("analysis response rejected (%s): %s", e.kind.value, e)
        return AnalysisResponse(error=str(e))

    logger.info(
        "analysis completed: significant=%s confidence=%s files=%d",
        result.is_significant,
        result.confidence,
        len(request.file_paths),
    )
    return AnalysisResponse(result=result)
