"""Pytest configuration and fixtures for streamerctl tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from streamerctl.core.auth import AuthSession
from streamerctl.models.selection import SelectionPath


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://streamer-test.example.org
    verify_ssl: false
    default_project: 3010000.01

  production:
    url: https://streamer.example.org
    verify_ssl: true
"""


@pytest.fixture
def sample_config_with_credentials_yaml() -> str:
    """Sample config YAML with credentials."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://streamer-test.example.org
    username: testuser
    password: testpass
    verify_ssl: false
    default_project: 3010000.01

  production:
    url: https://streamer.example.org
    username: produser
    password: prodpass
    verify_ssl: true
"""


@pytest.fixture
def auth_session() -> AuthSession:
    """Logged-in session for a test server."""
    return AuthSession(
        url="https://streamer.example.org",
        username="testuser",
        password="testpass",
        cookies={"connect.sid": "abc123"},
    )


@pytest.fixture
def destination() -> SelectionPath:
    """Completed destination path."""
    return SelectionPath(
        project_number="3010000.01",
        subject_label="001",
        session_label="1",
        data_type="meg",
    )
