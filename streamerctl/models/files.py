"""Local file selected for upload."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def new_uid() -> str:
    """Return a uid unique to one selection event."""
    return f"sel-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class FileEntry:
    """One selected file.

    ``path`` is where the bytes are read from when the upload job runs;
    nothing is loaded at selection time.
    """

    uid: str
    name: str
    size: int
    path: Optional[Path] = field(default=None, compare=False)

    @classmethod
    def from_path(cls, path: Path, uid: Optional[str] = None) -> "FileEntry":
        """Create an entry for a local file, reading only its size."""
        return cls(
            uid=uid or new_uid(),
            name=path.name,
            size=path.stat().st_size,
            path=path,
        )

    @property
    def size_display(self) -> str:
        """Return human-readable file size."""
        return format_size(self.size)


def format_size(size: float) -> str:
    """Return a human-readable size string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"
