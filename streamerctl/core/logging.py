"""Logging utilities for streamerctl.

Provides structured logging with audit trail support.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from streamerctl.models.selection import SelectionPath

# =============================================================================
# Constants
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
AUDIT_LOGGER_NAME = "streamerctl.audit"


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure logging for streamerctl.

    Args:
        level: Base logging level.
        quiet: If True, only show errors.
        verbose: If True, show debug messages.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
    )

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


# =============================================================================
# Log Context
# =============================================================================


class LogContext:
    """Context manager that logs start, duration and failure of an operation."""

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        **context: Any,
    ):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.context = context
        self.start_time: Optional[datetime] = None

    def _context_str(self) -> str:
        return ", ".join(f"{k}={v}" for k, v in self.context.items())

    def __enter__(self) -> "LogContext":
        self.start_time = datetime.now()
        self.logger.info("Starting %s (%s)", self.operation, self._context_str())
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        duration = (datetime.now() - self.start_time).total_seconds() if self.start_time else 0

        if exc_type:
            self.logger.error(
                "%s failed after %.2fs: %s",
                self.operation,
                duration,
                exc_val,
            )
        else:
            self.logger.info("%s completed in %.2fs", self.operation, duration)


# =============================================================================
# Audit Logger
# =============================================================================


class AuditLogger:
    """Writes one JSON line per upload batch to the audit logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def log_upload(
        self,
        destination: SelectionPath,
        *,
        user: str,
        succeeded: int,
        failed: int,
        total_bytes: int,
    ) -> None:
        """Record the outcome of a dispatched batch.

        Failed batches are logged at WARNING so they surface without --verbose.
        """
        audit_record: dict[str, Any] = {
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "operation": "upload",
            "user": user,
            "destination": destination.display(),
            "project": destination.project_number,
            "subject": destination.subject_label,
            "session": destination.session_label,
            "data_type": destination.effective_data_type,
            "files": succeeded + failed,
            "failed": failed,
            "bytes": total_bytes,
            "success": failed == 0,
        }

        level = logging.INFO if failed == 0 else logging.WARNING
        self.logger.log(level, "AUDIT %s", json.dumps(audit_record))


def get_audit_logger() -> AuditLogger:
    """Get the audit logger instance."""
    return AuditLogger()
