"""Data models for streamerctl.

Provides the Pydantic project model and dataclasses for selection,
selected files and upload progress.
"""

from __future__ import annotations

from .base import BaseModel
from .files import FileEntry, format_size, new_uid
from .progress import (
    BatchProgress,
    BatchResult,
    BatchUploadState,
    JobResult,
    JobStatus,
    OperationPhase,
)
from .project import Project
from .selection import DATA_TYPE_OTHER, DATA_TYPES, SelectionPath

__all__ = [
    # Base
    "BaseModel",
    # Resources
    "Project",
    "FileEntry",
    "format_size",
    "new_uid",
    "SelectionPath",
    "DATA_TYPES",
    "DATA_TYPE_OTHER",
    # Progress
    "OperationPhase",
    "JobStatus",
    "BatchUploadState",
    "BatchProgress",
    "JobResult",
    "BatchResult",
]
