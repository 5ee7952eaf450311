"""Shared constants for uploader modules."""

from streamerctl.core.timeouts import UPLOAD_TIMEOUT_SECONDS

# =============================================================================
# Upload Request Defaults
# =============================================================================

# Per-job HTTP timeout (5 minutes); exceeding it fails only that job
DEFAULT_TIMEOUT = UPLOAD_TIMEOUT_SECONDS

# Multipart field carrying the file bytes
UPLOAD_FILE_FIELD = "files"

# Content type announced for every uploaded file
UPLOAD_CONTENT_TYPE = "application/octet-stream"
