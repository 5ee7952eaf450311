"""Common utilities for uploader modules."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from streamerctl.models.files import FileEntry
from streamerctl.models.selection import SelectionPath


def collect_files(
    paths: Sequence[Path],
    *,
    recursive: bool = False,
) -> list[Path]:
    """Expand the given paths into a list of regular files.

    Files are kept in the order given. Directories contribute their
    non-hidden files in sorted order, descending into subdirectories only
    when ``recursive`` is set.

    Raises:
        ValueError: If a path does not exist.
    """
    files: list[Path] = []
    for path in paths:
        if not path.exists():
            raise ValueError(f"No such file or directory: {path}")

        if path.is_file():
            files.append(path)
            continue

        pattern = "**/*" if recursive else "*"
        for child in sorted(path.glob(pattern)):
            if child.is_file() and not child.name.startswith("."):
                files.append(child)

    return files


def entries_from_paths(paths: Sequence[Path]) -> list[FileEntry]:
    """Create one FileEntry per path, all from the same selection event."""
    return [FileEntry.from_path(path) for path in paths]


def build_upload_fields(entry: FileEntry, destination: SelectionPath) -> dict[str, str]:
    """Return the multipart text fields for one file's upload request."""
    fields = destination.as_form_fields()
    fields.update(
        {
            "filename": entry.name,
            "filesize": str(entry.size),
            "uid": entry.uid,
        }
    )
    return fields
