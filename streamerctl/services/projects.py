"""Project service for listing upload destinations."""

from __future__ import annotations

import builtins

from streamerctl.models.project import Project

from .base import BaseService


class ProjectService(BaseService):
    """Service for project operations."""

    def list(self, limit: int | None = None) -> builtins.list[Project]:
        """List projects the user may upload into, sorted by number.

        Args:
            limit: Maximum number of results
        """
        projects = sorted(self.client.list_projects(self.session), key=lambda p: p.number)
        if limit:
            projects = projects[:limit]
        return projects
