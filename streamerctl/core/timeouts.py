"""HTTP timeout defaults shared across streamerctl."""

# Login is expected to answer almost immediately
LOGIN_TIMEOUT_SECONDS = 1.0

# Each upload job gets 5 minutes, exceeding it counts as a job failure
UPLOAD_TIMEOUT_SECONDS = 300.0

# Everything else (project listing)
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
