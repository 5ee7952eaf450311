"""Registry of files selected for the next upload batch.

Incoming batches are accepted or rejected as a whole: a single oversized
file or name clash drops every file of that batch while files registered
earlier stay as they are.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from streamerctl.core.exceptions import BatchRejectedError
from streamerctl.core.logging import get_logger
from streamerctl.models.files import FileEntry

logger = get_logger(__name__)

# 1 GB = 1024 * 1024 * 1024 bytes
MAX_FILE_SIZE_BYTES = 1073741824
MAX_FILE_SIZE_DISPLAY = "1 GB"


# =============================================================================
# Batch Decision
# =============================================================================


class RejectionReason(Enum):
    """Why a batch was rejected."""

    DUPLICATE = "duplicate"
    SIZE = "size"


@dataclass(frozen=True)
class BatchDecision:
    """Outcome of evaluating an incoming batch."""

    accepted: bool
    reason: RejectionReason | None = None
    offending_names: tuple[str, ...] = ()
    duplicate_names: tuple[str, ...] = ()
    oversized_names: tuple[str, ...] = ()
    max_size_display: str = MAX_FILE_SIZE_DISPLAY

    @property
    def message(self) -> str:
        """User-facing explanation, empty for accepted batches."""
        if self.accepted:
            return ""
        names = self.offending_names
        if self.reason == RejectionReason.DUPLICATE:
            if len(names) == 1:
                return f'Filename already exists, please rename: "{names[0]}"'
            return f"Filenames already exist, please rename: [{', '.join(names)}]"
        if self.reason is None:
            return f"Batch rejected: [{', '.join(names)}]"
        prefix = (
            "Maximum file size exceeded (file size must be less than "
            f"{self.max_size_display} for a single file)"
        )
        if len(names) == 1:
            return f'{prefix}: "{names[0]}"'
        return f"{prefix}: [{', '.join(names)}]"

    def raise_for_rejection(self) -> None:
        """Raise BatchRejectedError if the batch was rejected."""
        if self.accepted:
            return
        reason = self.reason.value if self.reason is not None else ""
        raise BatchRejectedError(self.message, reason, self.offending_names)


def _unique(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))


def evaluate_batch(
    candidates: Sequence[FileEntry],
    existing: Sequence[FileEntry],
    max_size_bytes: int = MAX_FILE_SIZE_BYTES,
    max_size_display: str = MAX_FILE_SIZE_DISPLAY,
) -> BatchDecision:
    """Check an incoming batch against the size limit and existing names.

    Args:
        candidates: Newly selected files.
        existing: Files already registered.
        max_size_bytes: Files of this size or larger are rejected.
        max_size_display: Size limit as shown in the rejection message.

    Returns:
        Accepted decision, or a rejection naming every offending file.
        Duplicate names take precedence over size violations.
    """
    oversized = [f.name for f in candidates if f.size >= max_size_bytes]

    duplicates: list[str] = []
    for i, entry in enumerate(candidates):
        clash_existing = any(
            other.name == entry.name and other.uid != entry.uid for other in existing
        )
        clash_batch = any(
            other.name == entry.name for j, other in enumerate(candidates) if j != i
        )
        if clash_existing or clash_batch:
            duplicates.append(entry.name)

    duplicate_names = _unique(duplicates)
    oversized_names = _unique(oversized)

    if duplicate_names:
        reason = RejectionReason.DUPLICATE
        offending = duplicate_names
    elif oversized_names:
        reason = RejectionReason.SIZE
        offending = oversized_names
    else:
        return BatchDecision(accepted=True, max_size_display=max_size_display)

    return BatchDecision(
        accepted=False,
        reason=reason,
        offending_names=offending,
        duplicate_names=duplicate_names,
        oversized_names=oversized_names,
        max_size_display=max_size_display,
    )


# =============================================================================
# FileRegistry
# =============================================================================


@dataclass
class FileRegistry:
    """Ordered set of files selected for upload with a running size total."""

    max_size_bytes: int = MAX_FILE_SIZE_BYTES
    max_size_display: str = MAX_FILE_SIZE_DISPLAY
    _files: list[FileEntry] = field(default_factory=list, init=False, repr=False)
    _total_size: int = field(default=0, init=False, repr=False)

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[FileEntry]:
        return iter(self._files)

    def __bool__(self) -> bool:
        return bool(self._files)

    @property
    def files(self) -> tuple[FileEntry, ...]:
        """Snapshot of the registered files."""
        return tuple(self._files)

    @property
    def total_size(self) -> int:
        return self._total_size

    @property
    def has_files(self) -> bool:
        return bool(self._files)

    def submit_batch(self, candidates: Sequence[FileEntry]) -> BatchDecision:
        """Register a batch if every file in it passes the checks.

        Files whose uid is already registered are the same selection and are
        not added a second time.

        Returns:
            The decision; on rejection nothing is changed.
        """
        known_uids = {f.uid for f in self._files}
        incoming = [f for f in candidates if f.uid not in known_uids]

        decision = evaluate_batch(
            incoming,
            self._files,
            max_size_bytes=self.max_size_bytes,
            max_size_display=self.max_size_display,
        )
        if not decision.accepted:
            logger.info(
                "Rejected batch of %d file(s) (%s): %s",
                len(candidates),
                decision.reason.value if decision.reason else "",
                ", ".join(decision.offending_names),
            )
            return decision

        for entry in incoming:
            self._files.append(entry)
            self._total_size += entry.size
        logger.debug("Registered %d file(s), total %d bytes", len(incoming), self._total_size)
        return decision

    def remove(self, uid: str, name: str, size: int) -> bool:
        """Remove the entry matching uid and name, decrementing the total by size.

        Returns:
            True if an entry was removed.
        """
        for index, entry in enumerate(self._files):
            if entry.uid == uid and entry.name == name:
                del self._files[index]
                self._total_size -= size
                return True
        return False

    def clear(self) -> None:
        """Drop all files and reset the total."""
        self._files.clear()
        self._total_size = 0
