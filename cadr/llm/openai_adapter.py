"""OpenAI adapter for cadr."""

from __future__ import annotations

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from cadr.llm.base import NETWORK_CODE, SYSTEM_INSTRUCTION, TIMEOUT_CODE, LLMProvider
from cadr.llm.models import LLMError, ProviderCallOptions


class OpenAIProvider(LLMProvider):
    """OpenAI adapter using the async SDK's native request timeout."""

    name = "openai"

    async def analyze(self, prompt: str, options: ProviderCallOptions) -> str | None:
        client = AsyncOpenAI(
            api_key=options.api_key,
            timeout=options.timeout_seconds,
            max_retries=0,
        )
        try:
            completion = await client.chat.completions.create(
                model=options.model,
                temperature=options.temperature,
                max_tokens=options.max_output_tokens,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": prompt},
                ],
            )
        except APITimeoutError as e:
            raise LLMError(self.name, "analyze", e, code=TIMEOUT_CODE) from e
        except APIConnectionError as e:
            raise LLMError(self.name, "analyze", e, code=NETWORK_CODE) from e
        except APIStatusError as e:
            raise LLMError(self.name, "analyze", e, status=e.status_code) from e

        if not completion.choices:
            return None
        return completion.choices[0].message.content or None
