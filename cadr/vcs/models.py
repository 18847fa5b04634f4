"""Models for change-set resolution."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict

DEFAULT_BASE_REF = "origin/main"
DEFAULT_HEAD_REF = "HEAD"


@dataclass(frozen=True)
class Staged:
    """Only changes in the index (git diff --cached)."""

    def describe(self) -> str:
        return "staged"


@dataclass(frozen=True)
class AllUncommitted:
    """Staged and unstaged changes against HEAD."""

    def describe(self) -> str:
        return "uncommitted"


@dataclass(frozen=True)
class BranchDiff:
    """Commits reachable from head but not from base (merge-base comparison)."""

    base: str = DEFAULT_BASE_REF
    head: str = DEFAULT_HEAD_REF

    @property
    def range_spec(self) -> str:
        return f"{self.base}...{self.head}"

    def describe(self) -> str:
        return f"between {self.base} and {self.head}"


ChangeSetMode = Staged | AllUncommitted | BranchDiff


class ChangeSet(BaseModel):
    """Files and unified diff text for one comparison."""

    model_config = ConfigDict(frozen=True)

    file_paths: tuple[str, ...] = ()
    diff_text: str = ""

    @property
    def has_files(self) -> bool:
        return len(self.file_paths) > 0

    @property
    def has_diff(self) -> bool:
        return bool(self.diff_text.strip())


class VcsErrorKind(str, Enum):
    NOT_A_REPOSITORY = "not_a_repository"
    TOOL_NOT_FOUND = "tool_not_found"
    OPERATION_FAILED = "operation_failed"


class VcsError(Exception):
    """A git invocation failed."""

    def __init__(self, kind: VcsErrorKind, message: str, stderr: str = "") -> None:
        self.kind = kind
        self.stderr = stderr
        super().__init__(message)
