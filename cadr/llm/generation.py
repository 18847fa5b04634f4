"""GenerationEngine: drafts the MADR document body."""

from __future__ import annotations

import logging
import re

from cadr.config.models import AnalysisConfig
from cadr.llm.analysis import strip_code_fence
from cadr.llm.gateway import EMPTY_RESPONSE_MESSAGE, call_provider
from cadr.llm.models import (
    UNTITLED_DECISION,
    GenerationRequest,
    GenerationResponse,
    GenerationResult,
)

logger = logging.getLogger(__name__)

_H1 = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)


def extract_title(content: str) -> str:
    """Title from the first level-one heading, or the untitled sentinel."""
    match = _H1.search(content)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return UNTITLED_DECISION


async def generate_adr_content(
    config: AnalysisConfig, request: GenerationRequest
) -> GenerationResponse:
    """Ask the model for an ADR draft. Never raises."""
    reply = await call_provider(config, request.generation_prompt, "generation")
    if not reply.ok:
        return GenerationResponse(error=reply.error)

    content = strip_code_fence(reply.text)
    if not content:
        return GenerationResponse(error=EMPTY_RESPONSE_MESSAGE)

    title = extract_title(content)
    logger.info("generated ADR draft %r (%d chars)", title, len(content))
    return GenerationResponse(result=GenerationResult(content=content, title=title))
