"""Upload transport for streamerctl.

One multipart ``POST /upload`` per file, all dispatched concurrently on an
asyncio event loop. Use ``UploadService`` from ``streamerctl.services.uploads``
for the gated, audited entry point.
"""

from streamerctl.uploaders.common import build_upload_fields, collect_files, entries_from_paths
from streamerctl.uploaders.constants import (
    DEFAULT_TIMEOUT,
    UPLOAD_CONTENT_TYPE,
    UPLOAD_FILE_FIELD,
)
from streamerctl.uploaders.orchestrator import ProgressCallback, UploadOrchestrator

__all__ = [
    # Constants
    "DEFAULT_TIMEOUT",
    "UPLOAD_CONTENT_TYPE",
    "UPLOAD_FILE_FIELD",
    # Common utilities
    "build_upload_fields",
    "collect_files",
    "entries_from_paths",
    # Orchestrator
    "ProgressCallback",
    "UploadOrchestrator",
]
