"""Tests for streamerctl.services modules."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from streamerctl.core.auth import AuthSession
from streamerctl.core.exceptions import UploadNotPermittedError
from streamerctl.core.registry import FileRegistry
from streamerctl.core.selection import SelectionStateMachine
from streamerctl.models.files import FileEntry
from streamerctl.models.project import Project
from streamerctl.services.projects import ProjectService
from streamerctl.services.uploads import UploadService
from streamerctl.uploaders.orchestrator import UploadOrchestrator

# =============================================================================
# ProjectService Tests
# =============================================================================


class TestProjectService:
    """Tests for ProjectService."""

    def test_list_sorted(self, auth_session: AuthSession):
        client = MagicMock()
        client.list_projects.return_value = [Project(number="b"), Project(number="a")]

        service = ProjectService(client, auth_session)

        assert [p.number for p in service.list()] == ["a", "b"]
        client.list_projects.assert_called_once_with(auth_session)

    def test_list_limit(self, auth_session: AuthSession):
        client = MagicMock()
        client.list_projects.return_value = [Project(number=str(i)) for i in range(5)]

        assert len(ProjectService(client, auth_session).list(limit=2)) == 2


# =============================================================================
# UploadService Tests
# =============================================================================


def _ready_machine(data_type: str = "meg") -> SelectionStateMachine:
    machine = SelectionStateMachine(["3010000.01"])
    machine.select_project("3010000.01")
    machine.change_subject_label("001")
    machine.change_session_label("1")
    machine.select_data_type(data_type)
    return machine


def _registry(temp_dir: Path, count: int = 2) -> FileRegistry:
    registry = FileRegistry()
    entries = []
    for i in range(count):
        path = temp_dir / f"f{i}.fif"
        path.write_bytes(b"data")
        entries.append(FileEntry.from_path(path))
    registry.submit_batch(entries)
    return registry


def _service(auth_session: AuthSession, handler, monkeypatch) -> UploadService:
    client = MagicMock()
    client.base_url = "https://streamer.example.org"
    client.verify_ssl = True
    service = UploadService(client, auth_session)

    def build(progress_callback=None) -> UploadOrchestrator:
        return UploadOrchestrator(
            base_url=client.base_url,
            progress_callback=progress_callback,
            transport=httpx.MockTransport(handler),
        )

    monkeypatch.setattr(service, "_orchestrator", build)
    return service


class TestUploadService:
    """Tests for UploadService."""

    def test_refuses_without_files(self, auth_session: AuthSession):
        service = UploadService(MagicMock(), auth_session)

        with pytest.raises(UploadNotPermittedError, match="no files selected"):
            service.upload(_ready_machine(), FileRegistry())

    def test_refuses_incomplete_destination(self, temp_dir: Path, auth_session: AuthSession):
        machine = _ready_machine("other")
        service = UploadService(MagicMock(), auth_session)

        with pytest.raises(UploadNotPermittedError, match="destination incomplete"):
            service.upload(machine, _registry(temp_dir))

    def test_upload_leaves_registry_untouched(
        self, temp_dir: Path, auth_session: AuthSession, monkeypatch
    ):
        registry = _registry(temp_dir)
        service = _service(auth_session, lambda r: httpx.Response(200, json={}), monkeypatch)

        result = service.upload(_ready_machine(), registry)

        assert result.success is True
        assert result.total == 2
        assert len(registry) == 2

    def test_upload_writes_audit_record(
        self, temp_dir: Path, auth_session: AuthSession, monkeypatch, caplog
    ):
        service = _service(auth_session, lambda r: httpx.Response(500, json={}), monkeypatch)

        with caplog.at_level(logging.INFO, logger="streamerctl.audit"):
            result = service.upload(_ready_machine(), _registry(temp_dir, 1))

        assert result.overall_failed is True
        audit = [r for r in caplog.records if r.name == "streamerctl.audit"]
        assert len(audit) == 1
        assert audit[0].levelno == logging.WARNING
        record = json.loads(audit[0].getMessage().removeprefix("AUDIT "))
        assert record["project"] == "3010000.01"
        assert record["data_type"] == "meg"
        assert record["failed"] == 1
        assert record["success"] is False

    def test_progress_callback_forwarded(
        self, temp_dir: Path, auth_session: AuthSession, monkeypatch
    ):
        updates = []
        service = _service(auth_session, lambda r: httpx.Response(200, json={}), monkeypatch)

        service.upload(_ready_machine(), _registry(temp_dir), progress_callback=updates.append)

        assert updates[-1].percent == 100

    def test_acknowledge_keeps_destination(self, temp_dir: Path, auth_session: AuthSession):
        machine = _ready_machine()
        registry = _registry(temp_dir)

        UploadService(MagicMock(), auth_session).acknowledge(registry)

        assert len(registry) == 0
        assert registry.total_size == 0
        assert machine.is_complete
