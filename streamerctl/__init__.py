"""streamerctl - A CLI for uploading research data to the data streamer.

This package provides a command-line interface for sending local files to
a project/subject/session/data-type destination on a streamer server:
- Log in and list the projects you may upload into
- Pick the destination step by step, with label validation
- Upload a batch of files concurrently with progress reporting
"""

__version__ = "0.1.0"

from streamerctl.core.auth import AuthSession
from streamerctl.core.client import StreamerClient
from streamerctl.core.config import Config, Profile
from streamerctl.core.exceptions import (
    AuthenticationError,
    BatchRejectedError,
    ConfigurationError,
    ConnectionError,
    NetworkError,
    StreamerError,
    ValidationError,
)
from streamerctl.core.registry import FileRegistry
from streamerctl.core.selection import SelectionStateMachine, SelectionStep
from streamerctl.uploaders.orchestrator import UploadOrchestrator

__all__ = [
    "__version__",
    "AuthSession",
    "StreamerClient",
    "Config",
    "Profile",
    "FileRegistry",
    "SelectionStateMachine",
    "SelectionStep",
    "UploadOrchestrator",
    "StreamerError",
    "AuthenticationError",
    "BatchRejectedError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "ValidationError",
]
