"""Change-set resolution against the local git repository."""

from cadr.vcs.git import GitClient
from cadr.vcs.models import (
    AllUncommitted,
    BranchDiff,
    ChangeSet,
    ChangeSetMode,
    Staged,
    VcsError,
    VcsErrorKind,
)
from cadr.vcs.resolver import ChangeSetResolver

__all__ = [
    "AllUncommitted",
    "BranchDiff",
    "ChangeSet",
    "ChangeSetMode",
    "ChangeSetResolver",
    "GitClient",
    "Staged",
    "VcsError",
    "VcsErrorKind",
]
