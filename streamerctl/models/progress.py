"""Progress models for tracking upload batches.

``BatchUploadState`` is the live per-batch record mutated only by the
orchestrator; callbacks receive immutable ``BatchProgress`` snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .selection import SelectionPath


class OperationPhase(Enum):
    """Operation phases for progress tracking."""

    UPLOADING = "uploading"
    COMPLETE = "complete"
    ERROR = "error"


class JobStatus(Enum):
    """Lifecycle of one upload job."""

    PENDING = "pending"
    INFLIGHT = "inflight"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_settled(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.FAILED)


@dataclass
class BatchUploadState:
    """Aggregate state of one dispatched batch.

    The percentage is derived from the number of settled jobs, so it does
    not depend on the order in which jobs finish.
    """

    jobs: dict[str, JobStatus] = field(default_factory=dict)
    settled: int = 0
    aggregate_percent: int = 0
    overall_failed: bool = False

    @classmethod
    def for_uids(cls, uids: List[str]) -> "BatchUploadState":
        state = cls(jobs={uid: JobStatus.PENDING for uid in uids})
        if not uids:
            state.aggregate_percent = 100
        return state

    @property
    def total(self) -> int:
        return len(self.jobs)

    @property
    def increment(self) -> int:
        """Percentage points added per settled job."""
        if self.total == 0:
            return 100
        return 100 // self.total

    @property
    def is_complete(self) -> bool:
        return self.settled == self.total

    def mark_inflight(self, uid: str) -> None:
        self.jobs[uid] = JobStatus.INFLIGHT

    def settle(self, uid: str, success: bool) -> None:
        """Record a finished job and advance the percentage.

        Settling an already-settled job is ignored.
        """
        if self.jobs[uid].is_settled:
            return
        self.jobs[uid] = JobStatus.DONE if success else JobStatus.FAILED
        self.settled += 1
        if not success:
            self.overall_failed = True

        if self.is_complete:
            # floor(100 / n) per job undershoots when n does not divide 100
            self.aggregate_percent = 100
        else:
            self.aggregate_percent = max(self.aggregate_percent, self.settled * self.increment)


@dataclass(frozen=True)
class BatchProgress:
    """Snapshot passed to progress callbacks."""

    phase: OperationPhase
    settled: int
    total: int
    percent: int
    overall_failed: bool
    uid: str = ""
    file_name: str = ""
    success: bool = True
    message: str = ""


@dataclass
class JobResult:
    """Outcome of one file's upload request."""

    uid: str
    file_name: str
    size: int
    status: JobStatus
    duration: float = 0.0
    status_code: Optional[int] = None
    error: str = ""

    @property
    def success(self) -> bool:
        return self.status == JobStatus.DONE


@dataclass
class BatchResult:
    """Typed outcome of a dispatched batch."""

    destination: SelectionPath
    state: BatchUploadState
    results: List[JobResult] = field(default_factory=list)
    duration: float = 0.0

    @property
    def overall_failed(self) -> bool:
        return self.state.overall_failed

    @property
    def success(self) -> bool:
        return not self.state.overall_failed

    @property
    def percent(self) -> int:
        return self.state.aggregate_percent

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def failures(self) -> List[JobResult]:
        return [r for r in self.results if not r.success]

    @property
    def total_size_mb(self) -> float:
        return sum(r.size for r in self.results) / (1024 * 1024)

    @property
    def throughput_mbps(self) -> float:
        """Calculate upload throughput in MB/s."""
        if self.duration == 0:
            return 0.0
        return self.total_size_mb / self.duration
