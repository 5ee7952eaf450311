"""Main CLI entry point for streamerctl."""

from __future__ import annotations

import click

from streamerctl import __version__
from streamerctl.cli.auth import auth
from streamerctl.cli.common import Context, global_options, handle_errors, require_auth
from streamerctl.cli.config_cmd import config
from streamerctl.cli.project import project
from streamerctl.cli.upload import upload
from streamerctl.core.output import print_output

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="streamerctl")
def cli() -> None:
    """streamerctl - upload data files to a streamer server.

    Files go to a project/subject/session/data type destination and are
    sent concurrently, one request per file.

    Get started:

      streamerctl config init        # Create config file

      streamerctl auth login         # Check credentials

      streamerctl project list       # List projects

      streamerctl upload -i ./data   # Upload, prompting for the destination

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Command Groups
# =============================================================================

cli.add_command(config)
cli.add_command(auth)
cli.add_command(project)
cli.add_command(upload)


# =============================================================================
# Top-Level Commands
# =============================================================================


@cli.command()
@global_options
@require_auth
@handle_errors
def whoami(ctx: Context) -> None:
    """Show current user and server."""
    session = ctx.get_session()
    profile = ctx.get_profile()
    print_output(
        {
            "username": session.username,
            "server": session.url,
            "profile": ctx.profile_name or (ctx.config.default_profile if ctx.config else "-"),
            "default_project": profile.default_project or "-",
        },
        format=ctx.output_format,
        column_labels={
            "username": "User",
            "server": "Server",
            "profile": "Profile",
            "default_project": "Default Project",
        },
    )


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
