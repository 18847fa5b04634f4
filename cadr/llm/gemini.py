"""Google Gemini adapter for cadr."""

from __future__ import annotations

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from cadr.llm.base import (
    NETWORK_CODE,
    SYSTEM_INSTRUCTION,
    TIMEOUT_CODE,
    LLMProvider,
    race_with_timeout,
)
from cadr.llm.models import LLMError, ProviderCallOptions


class GeminiProvider(LLMProvider):
    """Gemini adapter using the google-genai async client.

    The request is raced against a timer instead of relying on a
    transport timeout.
    """

    name = "gemini"

    async def analyze(self, prompt: str, options: ProviderCallOptions) -> str | None:
        client = genai.Client(api_key=options.api_key)
        request = client.aio.models.generate_content(
            model=options.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_INSTRUCTION,
                temperature=options.temperature,
                max_output_tokens=options.max_output_tokens,
            ),
        )
        try:
            response = await race_with_timeout(request, options.timeout_seconds)
        except TimeoutError as e:
            raise LLMError(self.name, "analyze", e, code=TIMEOUT_CODE) from e
        except httpx.TimeoutException as e:
            raise LLMError(self.name, "analyze", e, code=TIMEOUT_CODE) from e
        except httpx.TransportError as e:
            raise LLMError(self.name, "analyze", e, code=NETWORK_CODE) from e
        except genai_errors.APIError as e:
            raise LLMError(self.name, "analyze", e, status=e.code) from e

        text = response.text if response is not None else None
        return text if isinstance(text, str) and text else None
