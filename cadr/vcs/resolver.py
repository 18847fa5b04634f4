"""ChangeSetResolver: turns a diff mode into file paths plus diff text."""

from __future__ import annotations

import fnmatch
import logging
import re
from collections.abc import Sequence

from cadr.vcs.git import GitClient
from cadr.vcs.models import ChangeSet, ChangeSetMode

logger = logging.getLogger(__name__)

_DIFF_HEADER = re.compile(r"^diff --git a/(.+?) b/(.+)$")


def matches_ignore_pattern(path: str, patterns: Sequence[str]) -> bool:
    """Check a path against ignore patterns.

    Patterns containing '/' match the full path, others match the basename.
    """
    name = path.rsplit("/", 1)[-1]
    for pattern in patterns:
        target = path if "/" in pattern else name
        if fnmatch.fnmatch(target, pattern):
            return True
    return False


def filter_diff_sections(diff_text: str, patterns: Sequence[str]) -> str:
    """Drop per-file sections of a unified diff whose path is ignored."""
    if not patterns or not diff_text:
        return diff_text

    kept: list[str] = []
    keep = True
    for line in diff_text.splitlines(keepends=True):
        header = _DIFF_HEADER.match(line.rstrip("\n"))
        if header:
            keep = not (
                matches_ignore_pattern(header.group(1), patterns)
                or matches_ignore_pattern(header.group(2), patterns)
            )
        if keep:
            kept.append(line)
    return "".join(kept)


class ChangeSetResolver:
    """Resolves a ChangeSetMode into a ChangeSet via the git collaborator."""

    def __init__(
        self,
        git: GitClient | None = None,
        ignore_patterns: Sequence[str] | None = None,
    ) -> None:
        self.git = git or GitClient()
        self.ignore_patterns = list(ignore_patterns or [])

    async def resolve(self, mode: ChangeSetMode) -> ChangeSet:
        """Return the ordered, de-duplicated changed files and their diff.

        Raises VcsError when git fails.
        """
        files = list(dict.fromkeys(await self.git.list_changed_files(mode)))
        if self.ignore_patterns:
            ignored = [f for f in files if matches_ignore_pattern(f, self.ignore_patterns)]
            if ignored:
                logger.info("ignoring %d file(s) matching ignore_patterns", len(ignored))
            files = [f for f in files if f not in ignored]

        if not files:
            return ChangeSet()

        diff_text = await self.git.get_diff_text(mode)
        diff_text = filter_diff_sections(diff_text, self.ignore_patterns)
        logger.info("resolved %d changed file(s) (%s)", len(files), mode.describe())
        return ChangeSet(file_paths=tuple(files), diff_text=diff_text)
