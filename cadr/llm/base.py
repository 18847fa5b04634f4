"""Abstract LLM interface for cadr."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import TypeVar

from cadr.llm.models import ProviderCallOptions

T = TypeVar("T")

SYSTEM_INSTRUCTION = "You are an expert software architect analyzing code changes."

TIMEOUT_CODE = "ETIMEDOUT"
NETWORK_CODE = "ECONNREFUSED"


class LLMProvider(ABC):
    """Provider-agnostic gateway to one LLM back-end.

    Each adapter issues exactly one request per call and enforces
    ``options.timeout_ms``. It returns None only when the back-end reports
    an empty successful response; every other failure is raised as an
    LLMError carrying a ``status`` or ``code``.
    """

    name: str

    @abstractmethod
    async def analyze(self, prompt: str, options: ProviderCallOptions) -> str | None:
        """Send *prompt* and return the response text."""
        ...


async def race_with_timeout(awaitable: Awaitable[T], timeout_s: float) -> T:
    """Await *awaitable*, raising TimeoutError if a timer settles first.

    The request and the timer run as two tasks; whichever completes first
    decides the outcome. A losing request is cancelled and its eventual
    result ignored.
    """
    request = asyncio.ensure_future(awaitable)
    timer = asyncio.ensure_future(asyncio.sleep(timeout_s))
    try:
        done, _ = await asyncio.wait({request, timer}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        timer.cancel()
        if not request.done():
            request.cancel()

    if request in done:
        return request.result()
    raise TimeoutError(f"Request timeout after {timeout_s:g}s")
