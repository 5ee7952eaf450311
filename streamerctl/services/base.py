"""Base service with the collaborators shared by all services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from streamerctl.core.auth import AuthSession
    from streamerctl.core.client import StreamerClient


class BaseService:
    """Base service class holding the client and the session it acts for."""

    def __init__(self, client: "StreamerClient", session: "AuthSession") -> None:
        """Initialize service.

        Args:
            client: StreamerClient bound to the server.
            session: Credentials of the logged-in user.
        """
        self.client = client
        self.session = session
