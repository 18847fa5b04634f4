"""Anthropic Claude adapter for cadr."""

from __future__ import annotations

from anthropic import APIConnectionError, APIStatusError, APITimeoutError, AsyncAnthropic

from cadr.llm.base import NETWORK_CODE, SYSTEM_INSTRUCTION, TIMEOUT_CODE, LLMProvider
from cadr.llm.models import LLMError, ProviderCallOptions


class ClaudeProvider(LLMProvider):
    """Claude adapter using the Anthropic async SDK."""

    name = "anthropic"

    async def analyze(self, prompt: str, options: ProviderCallOptions) -> str | None:
        client = AsyncAnthropic(
            api_key=options.api_key,
            timeout=options.timeout_seconds,
            max_retries=0,
        )
        try:
            message = await client.messages.create(
                model=options.model,
                max_tokens=options.max_output_tokens,
                temperature=options.temperature,
                system=SYSTEM_INSTRUCTION,
                messages=[{"role": "user", "content": prompt}],
            )
        except APITimeoutError as e:
            raise LLMError(self.name, "analyze", e, code=TIMEOUT_CODE) from e
        except APIConnectionError as e:
            raise LLMError(self.name, "analyze", e, code=NETWORK_CODE) from e
        except APIStatusError as e:
            raise LLMError(self.name, "analyze", e, status=e.status_code) from e

        if not message.content or not hasattr(message.content[0], "text"):
            return None
        return message.content[0].text or None
