"""LLM provider gateway and the analysis/generation engines."""

from cadr.llm.analysis import analyze_changes, parse_analysis_payload
from cadr.llm.base import LLMProvider, race_with_timeout
from cadr.llm.claude import ClaudeProvider
from cadr.llm.errors import ProviderErrorKind, ResponseErrorKind, classify_provider_error
from cadr.llm.gateway import ProviderName, call_provider, get_provider
from cadr.llm.gemini import GeminiProvider
from cadr.llm.generation import extract_title, generate_adr_content
from cadr.llm.models import (
    AnalysisRequest,
    AnalysisResponse,
    AnalysisResult,
    GenerationRequest,
    GenerationResponse,
    GenerationResult,
    LLMError,
    ProviderCallOptions,
)
from cadr.llm.openai_adapter import OpenAIProvider

__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "AnalysisResult",
    "ClaudeProvider",
    "GeminiProvider",
    "GenerationRequest",
    "GenerationResponse",
    "GenerationResult",
    "LLMError",
    "LLMProvider",
    "OpenAIProvider",
    "ProviderCallOptions",
    "ProviderErrorKind",
    "ProviderName",
    "ResponseErrorKind",
    "analyze_changes",
    "call_provider",
    "classify_provider_error",
    "extract_title",
    "generate_adr_content",
    "get_provider",
    "parse_analysis_payload",
    "race_with_timeout",
]
