"""Output subsystem: numbered ADR files on disk."""

from cadr.output.store import (
    DEFAULT_ADR_DIR,
    ADRStore,
    FileSystemErrorKind,
    SaveResult,
    adr_filename,
    next_adr_number,
    save_adr,
    slugify,
)

__all__ = [
    "ADRStore",
    "DEFAULT_ADR_DIR",
    "FileSystemErrorKind",
    "SaveResult",
    "adr_filename",
    "next_adr_number",
    "save_adr",
    "slugify",
]
