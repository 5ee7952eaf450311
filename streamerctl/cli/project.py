"""Project commands for streamerctl."""

from __future__ import annotations

import click

from streamerctl.cli.common import Context, global_options, handle_errors, require_auth
from streamerctl.core.output import print_output
from streamerctl.models.project import Project
from streamerctl.services.projects import ProjectService


@click.group()
def project() -> None:
    """List upload destinations."""
    pass


@project.command("list")
@click.option("--limit", type=int, default=None, help="Maximum number of projects")
@global_options
@require_auth
@handle_errors
def project_list(ctx: Context, limit: int | None) -> None:
    """List projects you may upload into.

    Example:
        streamerctl project list
        streamerctl project list -o json
        streamerctl project list -q  # numbers only
    """
    service = ProjectService(ctx.get_client(), ctx.get_session())
    projects = service.list(limit=limit)

    print_output(
        [p.to_row(Project.table_columns()) for p in projects],
        format=ctx.output_format,
        columns=Project.table_columns(),
        column_labels={"number": "Project"},
        quiet=ctx.quiet,
        id_field="number",
    )
