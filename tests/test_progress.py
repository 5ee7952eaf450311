"""Tests for streamerctl.models.progress module."""

from __future__ import annotations

import pytest

from streamerctl.models.progress import (
    BatchResult,
    BatchUploadState,
    JobResult,
    JobStatus,
)
from streamerctl.models.selection import SelectionPath


class TestBatchUploadState:
    """Tests for the aggregate percentage."""

    def test_starts_pending(self):
        state = BatchUploadState.for_uids(["a", "b"])
        assert state.aggregate_percent == 0
        assert set(state.jobs.values()) == {JobStatus.PENDING}

    @pytest.mark.parametrize("count", [1, 3, 6, 7, 9, 99, 100, 101, 150])
    def test_reaches_exactly_100(self, count: int):
        uids = [str(i) for i in range(count)]
        state = BatchUploadState.for_uids(uids)
        seen = [state.aggregate_percent]

        for i, uid in enumerate(reversed(uids)):
            state.settle(uid, success=i % 2 == 0)
            seen.append(state.aggregate_percent)

        assert seen == sorted(seen)
        assert seen[-1] == 100
        assert all(p < 100 for p in seen[:-1])

    def test_failure_still_counts(self):
        state = BatchUploadState.for_uids(["a", "b", "c"])
        state.settle("a", True)
        state.settle("b", False)
        state.settle("c", True)

        assert state.overall_failed is True
        assert state.aggregate_percent == 100

    def test_intermediate_percent_uses_floor(self):
        state = BatchUploadState.for_uids([str(i) for i in range(7)])
        state.settle("0", True)
        state.settle("1", True)
        assert state.aggregate_percent == 28

    def test_double_settle_ignored(self):
        state = BatchUploadState.for_uids(["a", "b"])
        state.settle("a", True)
        state.settle("a", False)

        assert state.settled == 1
        assert state.overall_failed is False
        assert state.jobs["a"] == JobStatus.DONE

    def test_empty_batch_is_complete(self):
        state = BatchUploadState.for_uids([])
        assert state.is_complete
        assert state.aggregate_percent == 100

    def test_mark_inflight(self):
        state = BatchUploadState.for_uids(["a"])
        state.mark_inflight("a")
        assert state.jobs["a"] == JobStatus.INFLIGHT
        assert not state.jobs["a"].is_settled


class TestBatchResult:
    """Tests for BatchResult accessors."""

    def test_counts(self):
        state = BatchUploadState.for_uids(["a", "b"])
        state.settle("a", True)
        state.settle("b", False)
        result = BatchResult(
            destination=SelectionPath(project_number="p"),
            state=state,
            results=[
                JobResult(uid="a", file_name="a.fif", size=1024 * 1024, status=JobStatus.DONE),
                JobResult(
                    uid="b", file_name="b.fif", size=1024 * 1024, status=JobStatus.FAILED, error="x"
                ),
            ],
            duration=2.0,
        )

        assert result.succeeded == 1
        assert result.failed == 1
        assert [r.file_name for r in result.failures] == ["b.fif"]
        assert result.total_size_mb == 2.0
        assert result.throughput_mbps == 1.0
        assert result.success is False
