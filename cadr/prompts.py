"""Versioned prompt templates for significance analysis and ADR generation."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date

NO_FILES_MARKER = "No files"

ANALYSIS_PROMPT_V1 = """\
You are an expert principal engineer and software architect acting as a meticulous code reviewer. \
Your sole task is to determine if the provided git diff represents an architecturally significant \
change that warrants an Architectural Decision Record (ADR).

Given the following changed files:
{file_paths}

Diff content:
{diff_content}

A change is considered architecturally significant if it:
- Introduces a new external dependency, library, or service.
- Adds, removes, or modifies infrastructure components (e.g., databases, caches, queues, Docker services).
- Changes a public API contract, a data schema, or a critical data model.
- Alters authentication, authorization, or other core security patterns.
- Modifies cross-cutting concerns like logging, observability, or CI/CD pipelines.

Respond ONLY with a single, minified JSON object with no preamble, no markdown, and no additional \
text. The JSON object must adhere to the following schema:
{"is_significant": boolean, "reason": string, "confidence": number}

The "reason" should be a concise, one-sentence explanation for your decision, suitable for showing \
to a developer. If the change is not significant, the reason may be an empty string. \
"confidence" is optional and must be between 0 and 1.
"""

GENERATION_PROMPT_V1 = """\
You are an expert software architect. Your task is to write a comprehensive Architectural Decision \
Record (ADR) following the MADR (Markdown Architectural Decision Records) template.

Given the following code changes:
{file_paths}

Diff content:
{diff_content}

Generate an ADR that follows this EXACT structure:

# [Short title of solved problem and solution]

* Status: [proposed | rejected | accepted | deprecated | superseded by [ADR-0005](0005-example.md)]
* Date: {current_date}

## Context and Problem Statement

[Describe the context and problem statement in 2-3 sentences. What is the issue that we're addressing?]

## Decision Drivers

* [decision driver 1, e.g., a force, constraint, requirement]
* [decision driver 2]

## Considered Options

* [option 1]
* [option 2]

## Decision Outcome

Chosen option: "[option 1]", because [justification].

### Consequences

* Good, because [positive consequence]
* Bad, because [negative consequence]

## More Information

[Any additional context, links to related discussions, or implementation notes]

IMPORTANT INSTRUCTIONS:
1. Use the EXACT markdown structure shown above
2. Set Status to "accepted" (since this change is being committed)
3. The title should be concise, action-oriented, and describe the decision made
4. Keep Context and Problem Statement brief but clear (2-4 sentences)
5. List at least 2-3 decision drivers that influenced this choice
6. Include at least 2 considered options (including the chosen one)
7. Be specific about consequences - list both benefits and drawbacks
8. In "More Information", mention any technical details, related files, or future considerations

Respond ONLY with the markdown content of the ADR. Do not include any preamble, explanation, \
or markdown code fences. Start directly with the # title.
"""

_PLACEHOLDER = re.compile(r"\{(file_paths|diff_content|current_date)\}")


def _render(template: str, values: dict[str, str]) -> str:
    # Single pass: substituted diff text is never scanned for placeholders again.
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def _format_file_list(file_paths: Sequence[str]) -> str:
    return "\n".join(file_paths) if file_paths else NO_FILES_MARKER


def format_analysis(file_paths: Sequence[str], diff_text: str) -> str:
    """Render the analysis prompt for a change set."""
    return _render(
        ANALYSIS_PROMPT_V1,
        {"file_paths": _format_file_list(file_paths), "diff_content": diff_text},
    )


def format_generation(
    file_paths: Sequence[str],
    diff_text: str,
    today: date | None = None,
) -> str:
    """Render the MADR generation prompt, dated today unless *today* is given."""
    today = today or date.today()
    return _render(
        GENERATION_PROMPT_V1,
        {
            "file_paths": _format_file_list(file_paths),
            "diff_content": diff_text,
            "current_date": today.isoformat(),
        },
    )
