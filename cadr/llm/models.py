"""Pydantic models for the LLM subsystem."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator, model_validator

UNTITLED_DECISION = "Untitled Decision"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LLMError(Exception):
    """Wraps provider-specific exceptions with context.

    ``status`` carries the HTTP status reported by the back-end (when there
    is one) and ``code`` a transport-level discriminator such as
    ``ETIMEDOUT`` or ``ECONNREFUSED``.
    """

    def __init__(
        self,
        provider: str,
        operation: str,
        cause: Exception,
        status: int | None = None,
        code: str | None = None,
    ) -> None:
        self.provider = provider
        self.operation = operation
        self.status = status
        self.code = code
        super().__init__(f"{provider} {operation} failed: {cause}")
        self.__cause__ = cause


class ProviderCallOptions(BaseModel):
    """Per-call settings handed to a provider adapter."""

    api_key: str
    model: str
    timeout_ms: int = Field(gt=0)
    temperature: float = 0.3
    max_output_tokens: int = 500

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class AnalysisRequest(BaseModel):
    file_paths: list[str]
    diff_content: str
    repository_context: str = ""
    analysis_prompt: str


class AnalysisResult(BaseModel):
    is_significant: bool
    reason: str
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    timestamp: str = Field(default_factory=_utc_now)

    @model_validator(mode="after")
    def _significant_needs_reason(self) -> AnalysisResult:
        if self.is_significant and not self.reason.strip():
            raise ValueError("a significant change must carry a reason")
        return self


class AnalysisResponse(BaseModel):
    """Either a result or an error, never both and never neither."""

    result: AnalysisResult | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> AnalysisResponse:
        if (self.result is None) == (self.error is None):
            raise ValueError("exactly one of result or error must be set")
        return self


class GenerationRequest(BaseModel):
    file_paths: list[str]
    diff_content: str
    reason: str = ""
    generation_prompt: str


class GenerationResult(BaseModel):
    content: str
    title: str = UNTITLED_DECISION
    timestamp: str = Field(default_factory=_utc_now)

    @field_validator("title")
    @classmethod
    def _default_blank_title(cls, v: str) -> str:
        return v.strip() or UNTITLED_DECISION


class GenerationResponse(BaseModel):
    """Either a generated document or an error."""

    result: GenerationResult | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> GenerationResponse:
        if (self.result is None) == (self.error is None):
            raise ValueError("exactly one of result or error must be set")
        return self
