"""Upload service: the gated entry point for sending a batch.

Checks that the destination is complete and files are selected, hands a
snapshot of the registry to the orchestrator, and writes one audit record
per batch.
"""

from __future__ import annotations

from streamerctl.core.exceptions import UploadNotPermittedError
from streamerctl.core.logging import LogContext, get_audit_logger, get_logger
from streamerctl.core.registry import FileRegistry
from streamerctl.core.selection import SelectionStateMachine
from streamerctl.models.progress import BatchResult
from streamerctl.uploaders.orchestrator import ProgressCallback, UploadOrchestrator

from .base import BaseService

logger = get_logger(__name__)


class UploadService(BaseService):
    """Service for uploading the selected files to the selected destination."""

    def _orchestrator(self, progress_callback: ProgressCallback | None) -> UploadOrchestrator:
        return UploadOrchestrator(
            base_url=self.client.base_url,
            verify_ssl=self.client.verify_ssl,
            progress_callback=progress_callback,
        )

    def upload(
        self,
        selection: SelectionStateMachine,
        registry: FileRegistry,
        progress_callback: ProgressCallback | None = None,
    ) -> BatchResult:
        """Upload every registered file.

        Args:
            selection: State machine holding the destination.
            registry: Selected files; not modified by this call.
            progress_callback: Optional callback for progress updates.

        Returns:
            BatchResult; job failures are reported through it, not raised.

        Raises:
            UploadNotPermittedError: If the destination is incomplete or no
                file is selected.
        """
        if not selection.upload_permitted(registry):
            if not registry.has_files:
                raise UploadNotPermittedError("no files selected")
            # Raises with the current step in the message
            selection.destination()

        destination = selection.destination()
        files = registry.files

        with LogContext(
            "upload",
            logger,
            project=destination.project_number,
            subject=destination.subject_label,
            session=destination.session_label,
            files=len(files),
        ):
            result = self._orchestrator(progress_callback).run(files, destination, self.session)

        get_audit_logger().log_upload(
            destination,
            user=self.session.username,
            succeeded=result.succeeded,
            failed=result.failed,
            total_bytes=registry.total_size,
        )
        return result

    def acknowledge(self, registry: FileRegistry) -> None:
        """Finish a batch: clear the files, keep the destination for the next one."""
        registry.clear()
