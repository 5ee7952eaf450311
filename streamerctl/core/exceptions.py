"""Exception hierarchy for streamerctl.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class StreamerError(Exception):
    """Base exception for all streamerctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(StreamerError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(StreamerError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class InvalidLabelError(ValidationError):
    """Label text does not match the required pattern."""

    def __init__(self, label_type: str, value: str, pattern: str):
        super().__init__(
            f"Invalid {label_type}: must be of form {pattern}",
            field=label_type,
            value=value,
        )
        self.label_type = label_type
        self.pattern = pattern


class SelectionOrderError(ValidationError):
    """A destination field was set before the fields it depends on."""

    def __init__(self, field: str, requires: str):
        super().__init__(f"Cannot set {field} before {requires}", field=field)
        self.requires = requires


# =============================================================================
# Batch Errors
# =============================================================================


class BatchRejectedError(StreamerError):
    """An incoming file batch was rejected as a whole."""

    def __init__(self, message: str, reason: str, offending_names: Sequence[str]):
        super().__init__(message)
        self.reason = reason
        self.offending_names = list(offending_names)


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(StreamerError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS, timeout)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Server is not reachable."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


class RequestFailedError(ConnectionError):
    """Server answered with a non-2xx status.

    ``body`` holds the response payload as shown to the user: pretty-printed
    JSON when the server sent JSON, the raw text otherwise.
    """

    def __init__(self, url: str, status_code: int, body: str = ""):
        msg = f"HTTP {status_code} from {url}"
        if body:
            msg = f"{msg}:\n{body}"
        super().__init__(msg, url)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(StreamerError):
    """Authentication failed."""

    def __init__(self, url: str | None = None, reason: str = ""):
        msg = "Authentication failed"
        if url:
            msg = f"{msg} for {url}"
        if reason:
            msg = f"{msg}: {reason}"
        details = {"url": url} if url else {}
        super().__init__(msg, details)
        self.url = url
        self.reason = reason


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(StreamerError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """A single file upload job failed."""

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = details or {}
        if file_name:
            full_details["file"] = file_name
        super().__init__("upload", message, full_details)
        self.file_name = file_name


class UploadNotPermittedError(OperationError):
    """Upload was triggered before the destination and files were ready."""

    def __init__(self, reason: str):
        super().__init__("upload", f"Upload not permitted: {reason}")
        self.reason = reason
