"""Core modules for streamerctl."""

from streamerctl.core.auth import AuthManager, AuthSession
from streamerctl.core.client import StreamerClient, describe_http_error, format_response_body
from streamerctl.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from streamerctl.core.exceptions import (
    AuthenticationError,
    BatchRejectedError,
    ConfigurationError,
    ConnectionError,
    InvalidLabelError,
    NetworkError,
    OperationError,
    RequestFailedError,
    SelectionOrderError,
    StreamerError,
    UploadError,
    UploadNotPermittedError,
    ValidationError,
)
from streamerctl.core.logging import LogContext, get_audit_logger, get_logger, setup_logging
from streamerctl.core.output import (
    ConsoleErrorReporter,
    ErrorReporter,
    OutputFormat,
    console,
    print_error,
    print_json,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from streamerctl.core.registry import (
    MAX_FILE_SIZE_BYTES,
    BatchDecision,
    FileRegistry,
    RejectionReason,
    evaluate_batch,
)
from streamerctl.core.selection import SelectionStateMachine, SelectionStep
from streamerctl.core.validation import (
    is_valid_data_type_other,
    is_valid_session_label,
    is_valid_subject_label,
    resolve_label_input,
    validate_server_url,
)

__all__ = [
    # Exceptions
    "StreamerError",
    "AuthenticationError",
    "BatchRejectedError",
    "ConfigurationError",
    "ConnectionError",
    "InvalidLabelError",
    "NetworkError",
    "OperationError",
    "RequestFailedError",
    "SelectionOrderError",
    "UploadError",
    "UploadNotPermittedError",
    "ValidationError",
    # Validation
    "is_valid_subject_label",
    "is_valid_session_label",
    "is_valid_data_type_other",
    "resolve_label_input",
    "validate_server_url",
    # Registry
    "MAX_FILE_SIZE_BYTES",
    "BatchDecision",
    "FileRegistry",
    "RejectionReason",
    "evaluate_batch",
    # Selection
    "SelectionStateMachine",
    "SelectionStep",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "StreamerClient",
    "describe_http_error",
    "format_response_body",
    # Auth
    "AuthManager",
    "AuthSession",
    # Output
    "OutputFormat",
    "ErrorReporter",
    "ConsoleErrorReporter",
    "print_output",
    "print_table",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "get_logger",
    "get_audit_logger",
    "setup_logging",
    "LogContext",
]
