"""Local git queries used to resolve a change set."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from cadr.vcs.models import (
    AllUncommitted,
    BranchDiff,
    ChangeSetMode,
    Staged,
    VcsError,
    VcsErrorKind,
)

logger = logging.getLogger(__name__)

# One line of context instead of git's default three keeps prompts small.
DIFF_CONTEXT_LINES = 1

_NOT_A_REPO_MESSAGE = "Not in a Git repository. Please run 'cadr' from within a Git repository."
_GIT_NOT_FOUND_MESSAGE = "Git is not installed. Please install Git and try again."
_GIT_FAILED_MESSAGE = "Unable to read Git repository. Please check repository permissions."


def comparison_args(mode: ChangeSetMode) -> list[str]:
    """Return the `git diff` arguments selecting the comparison for *mode*."""
    match mode:
        case Staged():
            return ["diff", "--cached"]
        case AllUncommitted():
            return ["diff", "HEAD"]
        case BranchDiff():
            return ["diff", mode.range_spec]
    raise TypeError(f"Unknown change set mode: {mode!r}")


class GitClient:
    """Runs git as a subprocess (no shell) in a working directory."""

    def __init__(self, cwd: str | Path | None = None, executable: str = "git") -> None:
        self.cwd = cwd
        self.executable = executable

    async def list_changed_files(self, mode: ChangeSetMode) -> list[str]:
        stdout = await self._run([*comparison_args(mode), "--name-only"], mode)
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    async def get_diff_text(self, mode: ChangeSetMode) -> str:
        return await self._run(
            [*comparison_args(mode), f"--unified={DIFF_CONTEXT_LINES}"], mode
        )

    async def _run(self, args: list[str], mode: ChangeSetMode) -> str:
        logger.debug("running %s %s", self.executable, " ".join(args))
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.cwd,
            )
        except FileNotFoundError as e:
            raise VcsError(VcsErrorKind.TOOL_NOT_FOUND, _GIT_NOT_FOUND_MESSAGE) from e

        stdout_bytes, stderr_bytes = await process.communicate()
        stderr = stderr_bytes.decode("utf-8", errors="replace").strip()
        if process.returncode == 0:
            return stdout_bytes.decode("utf-8", errors="replace")

        logger.warning("git %s exited with %s: %s", args[0], process.returncode, stderr)
        raise _error_for_exit(process.returncode, mode, stderr)


def _error_for_exit(returncode: int | None, mode: ChangeSetMode, stderr: str) -> VcsError:
    if returncode == 127:
        return VcsError(VcsErrorKind.TOOL_NOT_FOUND, _GIT_NOT_FOUND_MESSAGE, stderr)
    if returncode == 128:
        if isinstance(mode, BranchDiff):
            return VcsError(
                VcsErrorKind.OPERATION_FAILED,
                f"Invalid git references: {mode.range_spec}. "
                "Please ensure both references exist.",
                stderr,
            )
        return VcsError(VcsErrorKind.NOT_A_REPOSITORY, _NOT_A_REPO_MESSAGE, stderr)
    return VcsError(VcsErrorKind.OPERATION_FAILED, _GIT_FAILED_MESSAGE, stderr)
