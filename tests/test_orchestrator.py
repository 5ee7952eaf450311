"""Tests for streamerctl.uploaders.orchestrator module."""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path

import httpx
import pytest

from streamerctl.core.auth import AuthSession
from streamerctl.core.exceptions import InvalidURLError
from streamerctl.models.files import FileEntry
from streamerctl.models.progress import BatchProgress, JobStatus, OperationPhase
from streamerctl.models.selection import SelectionPath
from streamerctl.uploaders.common import build_upload_fields, collect_files
from streamerctl.uploaders.orchestrator import UploadOrchestrator

BASE_URL = "https://streamer.example.org"


def _make_files(temp_dir: Path, count: int) -> list[FileEntry]:
    entries = []
    for i in range(count):
        path = temp_dir / f"run{i:02d}.fif"
        path.write_bytes(b"x" * (i + 1))
        entries.append(FileEntry.from_path(path))
    return entries


def _orchestrator(handler, **kwargs) -> UploadOrchestrator:
    return UploadOrchestrator(
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"status": "ok"})


# =============================================================================
# Batch Outcome Tests
# =============================================================================


class TestBatchOutcome:
    """Tests for aggregate results."""

    def test_all_succeed(self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession):
        files = _make_files(temp_dir, 3)

        result = _orchestrator(_ok).run(files, destination, auth_session)

        assert result.success is True
        assert result.overall_failed is False
        assert result.percent == 100
        assert result.succeeded == 3
        assert [r.status for r in result.results] == [JobStatus.DONE] * 3

    def test_one_failure_marks_batch_failed(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 3)
        failing = files[1].name

        def handler(request: httpx.Request) -> httpx.Response:
            if f'filename="{failing}"'.encode() in request.content:
                return httpx.Response(500, json={"error": "disk full"})
            return httpx.Response(200, json={})

        result = _orchestrator(handler).run(files, destination, auth_session)

        assert result.overall_failed is True
        assert result.percent == 100
        assert result.succeeded == 2
        assert result.failed == 1

        failure = result.failures[0]
        assert failure.file_name == failing
        assert failure.status_code == 500
        assert failure.error == json.dumps({"error": "disk full"}, indent=2)

    def test_seven_files_reach_exactly_100(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 7)
        updates: list[BatchProgress] = []

        result = _orchestrator(_ok, progress_callback=updates.append).run(
            files, destination, auth_session
        )

        assert result.percent == 100
        job_percents = [u.percent for u in updates if u.uid]
        assert job_percents == [14, 28, 42, 56, 70, 84, 100]

    def test_empty_batch(self, destination: SelectionPath, auth_session: AuthSession):
        result = _orchestrator(_ok).run([], destination, auth_session)

        assert result.total == 0
        assert result.percent == 100
        assert result.success is True

    def test_non_json_error_body_shown_as_text(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 1)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        result = _orchestrator(handler).run(files, destination, auth_session)

        assert result.failures[0].error == "Bad Gateway"

    def test_timeout_is_ordinary_failure(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 2)

        def handler(request: httpx.Request) -> httpx.Response:
            if b'filename="run00.fif"' in request.content:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json={})

        result = _orchestrator(handler, timeout=300).run(files, destination, auth_session)

        assert result.overall_failed is True
        assert result.succeeded == 1
        assert result.failures[0].error.startswith("Upload timed out after 300s")
        assert result.failures[0].status_code is None

    def test_transport_error_message_shown_as_is(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 1)

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        result = _orchestrator(handler).run(files, destination, auth_session)

        assert result.failures[0].error == "Connection refused"

    def test_missing_local_path_fails_job(
        self, destination: SelectionPath, auth_session: AuthSession
    ):
        entry = FileEntry(uid="u1", name="ghost.fif", size=1)

        result = _orchestrator(_ok).run([entry], destination, auth_session)

        assert result.overall_failed is True
        assert "ghost.fif" in result.failures[0].error

    def test_unreadable_file_fails_only_that_job(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 2)
        files[0].path.unlink()

        result = _orchestrator(_ok).run(files, destination, auth_session)

        assert result.failed == 1
        assert result.succeeded == 1
        assert result.percent == 100


# =============================================================================
# Request Tests
# =============================================================================


class TestRequests:
    """Tests for what each job sends."""

    def test_one_request_per_file_with_fields(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 2)
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={})

        _orchestrator(handler).run(files, destination, auth_session)

        assert len(requests) == 2
        for request in requests:
            assert request.method == "POST"
            assert request.url.path == "/upload"
            assert request.headers["authorization"].startswith("Basic ")
            assert "connect.sid=abc123" in request.headers.get("cookie", "")
            body = request.content
            assert b'name="projectNumber"\r\n\r\n3010000.01' in body
            assert b'name="subjectLabel"\r\n\r\n001' in body
            assert b'name="sessionLabel"\r\n\r\n1' in body
            assert b'name="dataType"\r\n\r\nmeg' in body
            assert b'name="files"' in body

        sent_uids = {
            entry.uid for entry in files for r in requests if entry.uid.encode() in r.content
        }
        assert sent_uids == {entry.uid for entry in files}

    def test_build_upload_fields(self, destination: SelectionPath):
        entry = FileEntry(uid="sel-1", name="run01.fif", size=2048)

        fields = build_upload_fields(entry, destination)

        assert fields == {
            "projectNumber": "3010000.01",
            "subjectLabel": "001",
            "sessionLabel": "1",
            "dataType": "meg",
            "filename": "run01.fif",
            "filesize": "2048",
            "uid": "sel-1",
        }

    def test_other_data_type_sends_free_text(self):
        destination = SelectionPath(
            project_number="p",
            subject_label="s",
            session_label="1",
            data_type="other",
            data_type_other="nirs",
        )
        fields = build_upload_fields(FileEntry(uid="u", name="a", size=1), destination)
        assert fields["dataType"] == "nirs"


# =============================================================================
# Concurrency and Progress Tests
# =============================================================================


class TestConcurrency:
    """Tests for concurrent dispatch."""

    def test_all_jobs_in_flight_together(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 4)

        async def scenario():
            arrived = 0
            all_arrived = asyncio.Event()

            async def handler(request: httpx.Request) -> httpx.Response:
                nonlocal arrived
                arrived += 1
                if arrived == len(files):
                    all_arrived.set()
                # Sequential dispatch would never release the first request
                await asyncio.wait_for(all_arrived.wait(), timeout=5)
                return httpx.Response(200, json={})

            return await _orchestrator(handler).dispatch(files, destination, auth_session)

        result = asyncio.run(scenario())

        assert result.success is True
        assert result.succeeded == 4

    def test_settlement_order_does_not_matter(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 3)
        updates: list[BatchProgress] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            # Later files finish first
            delay = 0.03 if b'filename="run00.fif"' in request.content else 0.0
            await asyncio.sleep(delay)
            return httpx.Response(200, json={})

        result = _orchestrator(handler, progress_callback=updates.append).run(
            files, destination, auth_session
        )

        assert [r.file_name for r in result.results] == [f.name for f in files]
        assert [u.percent for u in updates if u.uid] == [33, 66, 100]

    def test_progress_is_monotonic_and_phased(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 3)
        updates: list[BatchProgress] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if b'filename="run02.fif"' in request.content:
                return httpx.Response(400, json={"error": "bad label"})
            return httpx.Response(200, json={})

        _orchestrator(handler, progress_callback=updates.append).run(
            files, destination, auth_session
        )

        percents = [u.percent for u in updates]
        assert percents == sorted(percents)
        assert updates[0].phase == OperationPhase.UPLOADING
        assert updates[0].percent == 0
        assert updates[-1].phase == OperationPhase.ERROR
        assert updates[-1].percent == 100
        assert updates[-1].overall_failed is True


# =============================================================================
# Construction Tests
# =============================================================================


class TestConstruction:
    """Tests for orchestrator setup."""

    def test_invalid_url_rejected(self):
        with pytest.raises(InvalidURLError):
            UploadOrchestrator(base_url="streamer.example.org")

    def test_url_normalized(self):
        orchestrator = UploadOrchestrator(base_url="https://streamer.example.org/")
        assert orchestrator.base_url == BASE_URL


# =============================================================================
# collect_files Tests
# =============================================================================


class TestCollectFiles:
    """Tests for collect_files."""

    def test_files_kept_in_order(self, temp_dir: Path):
        b = temp_dir / "b.fif"
        a = temp_dir / "a.fif"
        b.write_text("b")
        a.write_text("a")

        assert collect_files([b, a]) == [b, a]

    def test_directory_sorted_without_hidden(self, temp_dir: Path):
        (temp_dir / "b.fif").write_text("b")
        (temp_dir / "a.fif").write_text("a")
        (temp_dir / ".DS_Store").write_text("x")

        assert [p.name for p in collect_files([temp_dir])] == ["a.fif", "b.fif"]

    def test_recursive(self, temp_dir: Path):
        nested = temp_dir / "sub"
        nested.mkdir()
        (nested / "c.fif").write_text("c")
        (temp_dir / "a.fif").write_text("a")

        assert [p.name for p in collect_files([temp_dir])] == ["a.fif"]
        assert sorted(p.name for p in collect_files([temp_dir], recursive=True)) == [
            "a.fif",
            "c.fif",
        ]

    def test_missing_path(self, temp_dir: Path):
        with pytest.raises(ValueError, match="No such file"):
            collect_files([temp_dir / "nope"])


# =============================================================================
# Connection Limit and Timeout Tests
# =============================================================================


async def _read_request(reader: asyncio.StreamReader) -> None:
    """Consume one HTTP/1.1 request, body included."""
    head = await reader.readuntil(b"\r\n\r\n")
    headers = {}
    for line in head.decode("latin-1").split("\r\n")[1:]:
        if ":" in line:
            key, value = line.split(":", 1)
            headers[key.strip().lower()] = value.strip()

    if "content-length" in headers:
        await reader.readexactly(int(headers["content-length"]))
    elif headers.get("transfer-encoding", "").lower() == "chunked":
        await reader.readuntil(b"0\r\n\r\n")


class TestConnectionLimits:
    """Tests against a real loopback server, where the connection pool applies."""

    @pytest.fixture(autouse=True)
    def _no_proxy(self, monkeypatch):
        for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY"):
            monkeypatch.delenv(var, raising=False)
            monkeypatch.delenv(var.lower(), raising=False)

    def test_client_pool_is_unbounded(
        self, monkeypatch, destination: SelectionPath, auth_session: AuthSession
    ):
        captured = {}
        real_client = httpx.AsyncClient

        def capture(**kwargs):
            captured.update(kwargs)
            return real_client(**kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", capture)
        _orchestrator(_ok).run([], destination, auth_session)

        limits = captured["limits"]
        assert limits.max_connections is None
        assert limits.max_keepalive_connections is None

    def test_more_than_100_requests_open_at_once(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 150)

        async def scenario():
            open_now = 0
            peak = 0
            all_open = asyncio.Event()

            async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
                nonlocal open_now, peak
                await _read_request(reader)
                open_now += 1
                peak = max(peak, open_now)
                if open_now == len(files):
                    all_open.set()
                try:
                    # A pooled client never gets past its limit, so give up eventually
                    await asyncio.wait_for(all_open.wait(), timeout=10)
                except asyncio.TimeoutError:
                    pass
                writer.write(
                    b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
                    b"Content-Length: 2\r\nConnection: close\r\n\r\n{}"
                )
                await writer.drain()
                open_now -= 1
                writer.close()

            server = await asyncio.start_server(handle, "127.0.0.1", 0, backlog=256)
            port = server.sockets[0].getsockname()[1]
            async with server:
                orchestrator = UploadOrchestrator(base_url=f"http://127.0.0.1:{port}")
                result = await orchestrator.dispatch(files, destination, auth_session)
            return result, peak

        result, peak = asyncio.run(scenario())

        assert peak == 150
        assert result.success is True
        assert result.succeeded == 150


class TestWholeRequestTimeout:
    """Tests that the job timeout bounds the entire request."""

    def test_trickling_response_times_out(
        self, temp_dir: Path, destination: SelectionPath, auth_session: AuthSession
    ):
        files = _make_files(temp_dir, 2)

        async def slow_body():
            # Each gap is shorter than the timeout, the total is not
            for _ in range(10):
                await asyncio.sleep(0.1)
                yield b"x"

        async def handler(request: httpx.Request) -> httpx.Response:
            if b'filename="run00.fif"' in request.content:
                return httpx.Response(200, content=slow_body())
            return httpx.Response(200, json={})

        started = time.monotonic()
        result = _orchestrator(handler, timeout=0.3).run(files, destination, auth_session)
        elapsed = time.monotonic() - started

        assert elapsed < 0.9
        assert result.overall_failed is True
        assert result.percent == 100
        assert result.succeeded == 1
        failure = result.failures[0]
        assert failure.file_name == "run00.fif"
        assert failure.status == JobStatus.FAILED
        assert failure.error == "Upload timed out after 0.3s"
        assert failure.status_code is None
