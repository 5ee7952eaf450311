"""HTTP client for the streamer REST endpoints.

Covers login and project listing. Uploads run through the async
orchestrator in ``streamerctl.uploaders``; both share the error
formatting helpers defined here. Nothing is retried automatically.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx

from streamerctl.core.auth import AuthSession
from streamerctl.core.exceptions import (
    AuthenticationError,
    NetworkError,
    RequestFailedError,
    ServerUnreachableError,
)
from streamerctl.core.logging import get_logger
from streamerctl.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS, LOGIN_TIMEOUT_SECONDS
from streamerctl.core.validation import validate_server_url
from streamerctl.models.project import Project

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

LOGIN_PATH = "/login"
PROJECTS_PATH = "/projects"
UPLOAD_PATH = "/upload"


# =============================================================================
# Error Formatting
# =============================================================================


def format_response_body(resp: httpx.Response) -> str:
    """Render a response body for display.

    JSON bodies are pretty-printed with an indent of 2; anything else is
    returned as text.
    """
    try:
        data = resp.json()
    except (ValueError, UnicodeDecodeError):
        return resp.text
    return json.dumps(data, indent=2)


def describe_http_error(exc: Exception) -> str:
    """Return the diagnostic text shown for a failed request.

    Errors carrying a response show its body; transport errors show their
    own message unchanged.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return format_response_body(exc.response)
    if isinstance(exc, RequestFailedError):
        return exc.body or exc.message
    message = str(exc)
    return message or type(exc).__name__


# =============================================================================
# StreamerClient
# =============================================================================


@dataclass
class StreamerClient:
    """HTTP client for login and project listing."""

    base_url: str
    verify_ssl: bool = True
    timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    transport: httpx.BaseTransport | None = field(default=None, repr=False)
    _client: httpx.Client | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=True,
                transport=self.transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> StreamerClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # Requests
    # =========================================================================

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Execute one HTTP request.

        Raises:
            ServerUnreachableError: If the connection cannot be opened.
            NetworkError: On timeouts and other transport failures.
            RequestFailedError: On a non-2xx response.
        """
        client = self._get_client()
        try:
            resp = client.request(method, path, **kwargs)
        except httpx.ConnectError as e:
            raise ServerUnreachableError(self.base_url) from e
        except httpx.TransportError as e:
            raise NetworkError(self.base_url, describe_http_error(e)) from e

        if not resp.is_success:
            logger.debug("%s %s -> HTTP %d", method, path, resp.status_code)
            raise RequestFailedError(
                f"{self.base_url}{path}", resp.status_code, format_response_body(resp)
            )
        return resp

    # =========================================================================
    # Authentication
    # =========================================================================

    def login(self, username: str, password: str) -> AuthSession:
        """Check credentials against the login endpoint.

        Returns:
            Session carrying the credentials and any cookies the server set.

        Raises:
            AuthenticationError: If the server reports an ``error`` field.
            NetworkError: On transport failures.
            RequestFailedError: On a non-2xx response.
        """
        if not username or not password:
            raise AuthenticationError(self.base_url, "Username and password required")

        resp = self._request(
            "POST",
            LOGIN_PATH,
            json={"username": username, "password": password},
            auth=(username, password),
            timeout=LOGIN_TIMEOUT_SECONDS,
        )

        try:
            data = resp.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("error"):
            raise AuthenticationError(self.base_url, str(data["error"]))

        logger.info("Logged in to %s as %s", self.base_url, username)
        return AuthSession(
            url=self.base_url,
            username=username,
            password=password,
            cookies=dict(resp.cookies),
        )

    # =========================================================================
    # Projects
    # =========================================================================

    def list_projects(self, session: AuthSession) -> list[Project]:
        """List the projects the session's user may upload into."""
        self._get_client().cookies.update(dict(session.cookies))
        resp = self._request("GET", PROJECTS_PATH, auth=session.basic_auth)
        data = resp.json()
        if isinstance(data, dict):
            data = data.get("projects", [])

        projects = []
        for item in data or []:
            if isinstance(item, dict):
                projects.append(Project(**item))
            else:
                projects.append(Project(number=item))
        return projects
