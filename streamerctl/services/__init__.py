"""Service layer for streamerctl.

Provides service classes that combine the client, the selection state and
the file registry into user-level operations.
"""

from __future__ import annotations

from .base import BaseService
from .projects import ProjectService
from .uploads import UploadService

__all__ = [
    "BaseService",
    "ProjectService",
    "UploadService",
]
