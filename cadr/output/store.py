"""ADRStore: numbers, names and writes ADR markdown files."""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_ADR_DIR = "docs/adr"

# Exactly four ASCII digits then a hyphen; "00012-x.md" and "12-x.md" do not count.
_ADR_NUMBER = re.compile(r"^([0-9]{4})-")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class FileSystemErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"


class SaveResult(BaseModel):
    success: bool
    file_path: str | None = None
    error: str | None = None
    error_kind: FileSystemErrorKind | None = None


def slugify(title: str) -> str:
    """Lowercase, hyphen-joined form of *title*.

    "Use PostgreSQL for Storage" -> "use-postgresql-for-storage". A title
    with no ASCII alphanumerics yields an empty slug.
    """
    return _NON_ALNUM.sub("-", title.lower()).strip("-")


def next_adr_number(directory: str | Path) -> int:
    """One past the highest NNNN- prefix in *directory*, or 1."""
    directory = Path(directory)
    if not directory.exists():
        return 1
    try:
        numbers = [
            int(m.group(1))
            for entry in directory.iterdir()
            if (m := _ADR_NUMBER.match(entry.name))
        ]
    except OSError as e:
        logger.warning("failed to scan %s for existing ADRs, defaulting to 1: %s", directory, e)
        return 1
    return max(numbers) + 1 if numbers else 1


def ensure_adr_directory(directory: str | Path) -> Path:
    directory = Path(directory)
    if not directory.is_dir():
        logger.info("creating ADR directory %s", directory)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def adr_filename(number: int, title: str) -> str:
    return f"{number:04d}-{slugify(title)}.md"


def save_adr(content: str, title: str, directory: str | Path = DEFAULT_ADR_DIR) -> SaveResult:
    """Write an ADR under the next free number.

    If the computed filename is already taken (another process won the
    race), the number is bumped once before giving up. I/O failures are
    reported in the SaveResult rather than raised.
    """
    directory = Path(directory)
    try:
        ensure_adr_directory(directory)
        number = next_adr_number(directory)
        for candidate in (number, number + 1):
            dest = directory / adr_filename(candidate, title)
            try:
                f = open(dest, "x", encoding="utf-8")
            except FileExistsError:
                logger.warning("ADR file already exists, trying the next number: %s", dest)
                continue
            try:
                with f:
                    f.write(content)
            except OSError:
                # Never leave a partial ADR holding the number.
                dest.unlink(missing_ok=True)
                raise
            logger.info("wrote %s (%d bytes)", dest, len(content))
            return SaveResult(success=True, file_path=str(dest))
    except PermissionError as e:
        logger.error("permission denied saving ADR in %s: %s", directory, e)
        return SaveResult(
            success=False,
            error=f"Permission denied writing to {directory}. Check directory permissions.",
            error_kind=FileSystemErrorKind.PERMISSION_DENIED,
        )
    except OSError as e:
        logger.error("failed to save ADR in %s: %s", directory, e)
        return SaveResult(
            success=False,
            error=f"Failed to save ADR: {e}",
            error_kind=FileSystemErrorKind.OTHER,
        )

    return SaveResult(
        success=False,
        error=f"ADR numbers {number:04d} and {number + 1:04d} are both taken in {directory}",
        error_kind=FileSystemErrorKind.OTHER,
    )


class ADRStore:
    """Saves ADR drafts into a single directory (docs/adr by default)."""

    def __init__(self, directory: str | Path = DEFAULT_ADR_DIR) -> None:
        self.directory = Path(directory)

    def next_number(self) -> int:
        return next_adr_number(self.directory)

    def save(self, content: str, title: str) -> SaveResult:
        return save_adr(content, title, self.directory)
