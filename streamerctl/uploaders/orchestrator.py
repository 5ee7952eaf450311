"""Concurrent batch uploader.

Every file of a batch becomes one independent ``POST /upload`` job. All
jobs start immediately on a single event loop; there is no worker cap and
no queue, and the connection pool is unbounded. Each job's timeout covers
the whole request. A failing job is recorded and never cancels its
siblings, and ``dispatch`` itself does not raise for job failures: callers
read the returned ``BatchResult``.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import httpx

from streamerctl.core.auth import AuthSession
from streamerctl.core.client import UPLOAD_PATH, describe_http_error
from streamerctl.core.exceptions import UploadError
from streamerctl.core.logging import get_logger
from streamerctl.core.validation import validate_server_url
from streamerctl.models.files import FileEntry
from streamerctl.models.progress import (
    BatchProgress,
    BatchResult,
    BatchUploadState,
    JobResult,
    JobStatus,
    OperationPhase,
)
from streamerctl.models.selection import SelectionPath
from streamerctl.uploaders.common import build_upload_fields
from streamerctl.uploaders.constants import (
    DEFAULT_TIMEOUT,
    UPLOAD_CONTENT_TYPE,
    UPLOAD_FILE_FIELD,
)

logger = get_logger(__name__)

ProgressCallback = Callable[[BatchProgress], None]

# Every job gets its own connection at once; the pool never queues a request
UNBOUNDED_LIMITS = httpx.Limits(max_connections=None, max_keepalive_connections=None)


@dataclass
class UploadOrchestrator:
    """Dispatches one upload job per file and tracks the batch."""

    base_url: str
    verify_ssl: bool = True
    timeout: float = DEFAULT_TIMEOUT
    progress_callback: ProgressCallback | None = None
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Public API
    # =========================================================================

    async def dispatch(
        self,
        files: Sequence[FileEntry],
        destination: SelectionPath,
        session: AuthSession,
    ) -> BatchResult:
        """Upload every file concurrently and wait until all jobs settle.

        Args:
            files: Files to upload; a snapshot is taken immediately.
            destination: Completed destination path.
            session: Credentials shared read-only by every job.

        Returns:
            BatchResult with per-job results in input order.
        """
        snapshot = tuple(files)
        state = BatchUploadState.for_uids([entry.uid for entry in snapshot])
        start = time.time()

        logger.info(
            "Dispatching %d upload job(s) to %s", len(snapshot), destination.display()
        )
        self._report(state, OperationPhase.UPLOADING, message="Starting uploads...")

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            limits=UNBOUNDED_LIMITS,
            verify=self.verify_ssl,
            auth=session.basic_auth,
            cookies=dict(session.cookies),
            transport=self.transport,
        ) as client:
            jobs = [
                asyncio.create_task(self._run_job(client, entry, destination, state))
                for entry in snapshot
            ]
            results = list(await asyncio.gather(*jobs))

        result = BatchResult(
            destination=destination,
            state=state,
            results=results,
            duration=time.time() - start,
        )

        if result.overall_failed:
            logger.warning(
                "Upload completed with %d failure(s) out of %d", result.failed, result.total
            )
            self._report(
                state,
                OperationPhase.ERROR,
                success=False,
                message=f"Upload completed with {result.failed} failures",
            )
        else:
            self._report(state, OperationPhase.COMPLETE, message="Upload complete!")

        return result

    def run(
        self,
        files: Sequence[FileEntry],
        destination: SelectionPath,
        session: AuthSession,
    ) -> BatchResult:
        """Blocking wrapper around ``dispatch``."""
        return asyncio.run(self.dispatch(files, destination, session))

    # =========================================================================
    # Jobs
    # =========================================================================

    async def _send(
        self,
        client: httpx.AsyncClient,
        entry: FileEntry,
        destination: SelectionPath,
    ) -> httpx.Response:
        """Send one file; the file handle is closed as soon as the request ends."""
        if entry.path is None:
            raise UploadError("No local path to read file from", file_name=entry.name)

        with entry.path.open("rb") as data:
            resp = await client.post(
                UPLOAD_PATH,
                data=build_upload_fields(entry, destination),
                files={UPLOAD_FILE_FIELD: (entry.name, data, UPLOAD_CONTENT_TYPE)},
            )
        resp.raise_for_status()
        return resp

    async def _run_job(
        self,
        client: httpx.AsyncClient,
        entry: FileEntry,
        destination: SelectionPath,
        state: BatchUploadState,
    ) -> JobResult:
        """Run one job to settlement, converting any failure into a result."""
        state.mark_inflight(entry.uid)
        start = time.time()
        status_code: int | None = None
        error = ""

        try:
            resp = await asyncio.wait_for(
                self._send(client, entry, destination), timeout=self.timeout
            )
            status_code = resp.status_code
        except asyncio.TimeoutError:
            # Covers the whole request, including a body that keeps trickling in
            error = f"Upload timed out after {self.timeout:g}s"
        except httpx.TimeoutException as e:
            error = f"Upload timed out after {self.timeout:g}s: {describe_http_error(e)}"
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            error = describe_http_error(e)
        except (httpx.HTTPError, OSError, UploadError) as e:
            error = describe_http_error(e)
        except Exception as e:
            logger.exception("Unexpected error uploading %s", entry.name)
            error = str(e) or type(e).__name__

        success = not error
        state.settle(entry.uid, success)

        if success:
            logger.info("Uploaded %s (%d bytes)", entry.name, entry.size)
        else:
            logger.warning("Upload of %s failed: %s", entry.name, error)

        self._report(
            state,
            OperationPhase.UPLOADING,
            uid=entry.uid,
            file_name=entry.name,
            success=success,
            message=f"{'Uploaded' if success else 'Failed'} {entry.name}",
        )

        return JobResult(
            uid=entry.uid,
            file_name=entry.name,
            size=entry.size,
            status=JobStatus.DONE if success else JobStatus.FAILED,
            duration=time.time() - start,
            status_code=status_code,
            error=error,
        )

    # =========================================================================
    # Progress
    # =========================================================================

    def _report(
        self,
        state: BatchUploadState,
        phase: OperationPhase,
        *,
        uid: str = "",
        file_name: str = "",
        success: bool = True,
        message: str = "",
    ) -> None:
        """Invoke the progress callback if provided."""
        if self.progress_callback is None:
            return
        self.progress_callback(
            BatchProgress(
                phase=phase,
                settled=state.settled,
                total=state.total,
                percent=state.aggregate_percent,
                overall_failed=state.overall_failed,
                uid=uid,
                file_name=file_name,
                success=success,
                message=message,
            )
        )
