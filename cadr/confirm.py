"""Interactive confirmation before drafting an ADR."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import TextIO

from rich.console import Console
from rich.markup import escape

_AFFIRMATIVE = {"", "y", "yes"}


def is_affirmative(answer: str) -> bool:
    """ENTER, "y" and "yes" (any case) confirm; anything else declines."""
    return answer.strip().lower() in _AFFIRMATIVE


def should_prompt(stream: TextIO | None = None, env: Mapping[str, str] | None = None) -> bool:
    """True when a human can answer: stdin is a TTY and CI is not set."""
    stream = stream if stream is not None else sys.stdin
    env = env if env is not None else os.environ
    is_ci = env.get("CI", "").lower() in ("true", "1")
    return bool(stream.isatty()) and not is_ci


def prompt_for_generation(reason: str, console: Console | None = None) -> bool:
    """Ask whether to draft an ADR. Blocks until a line is read."""
    console = console or Console()
    console.print(f"\n💭 {escape(reason)}\n")
    try:
        answer = console.input(
            "📝 Would you like to generate an ADR for this change? "
            '(Press ENTER or type "yes" to confirm, "no" to skip): '
        )
    except EOFError:
        return False
    return is_affirmative(answer)
