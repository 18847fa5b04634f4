from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AnalysisConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: Literal["openai", "gemini", "anthropic"]
    analysis_model: str = Field(min_length=1)
    api_key_env: str = Field(min_length=1)
    timeout_seconds: int = Field(ge=1, le=60)
    ignore_patterns: list[str] | None = None


class ConfigErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID = "invalid"


class ConfigError(Exception):
    """Raised when cadr.yaml is missing or does not validate."""

    def __init__(self, kind: ConfigErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)
