"""Config commands for streamerctl."""

from __future__ import annotations

from typing import Optional

import click

from streamerctl.core.config import CONFIG_FILE, Config
from streamerctl.core.exceptions import ConfigurationError, ValidationError
from streamerctl.core.output import (
    OutputFormat,
    print_error,
    print_key_value,
    print_output,
    print_success,
)
from streamerctl.core.validation import validate_server_url


def _load_config() -> Config:
    try:
        return Config.load()
    except ConfigurationError as e:
        print_error(str(e))
        raise SystemExit(1) from e


def _checked_url(url: str) -> str:
    try:
        return validate_server_url(url)
    except ValidationError as e:
        print_error(str(e))
        raise SystemExit(1) from e


@click.group()
def config() -> None:
    """Manage streamerctl configuration."""
    pass


@config.command("init")
@click.option("--url", prompt="Streamer server URL", help="Streamer server URL")
@click.option("--profile", default="default", help="Profile name")
@click.option("--username", "-u", default=None, help="Default username")
@click.option("--project", default=None, help="Default project number")
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
@click.option("--force", is_flag=True, help="Overwrite existing profile")
def config_init(
    url: str,
    profile: str,
    username: Optional[str],
    project: Optional[str],
    no_verify_ssl: bool,
    force: bool,
) -> None:
    """Create configuration file with a new profile.

    Example:
        streamerctl config init --url https://streamer.example.org
    """
    url = _checked_url(url)

    if CONFIG_FILE.exists():
        cfg = _load_config()
        if cfg.has_profile(profile) and not force:
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(1)
    else:
        cfg = Config()

    cfg.add_profile(
        name=profile,
        url=url,
        verify_ssl=not no_verify_ssl,
        default_project=project,
        username=username,
    )

    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save()

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value(
        {
            "profile": profile,
            "url": url,
            "username": username or "-",
            "default_project": project or "-",
        }
    )


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    cfg = _load_config()

    if not cfg.profiles:
        print_error("No configuration found. Run 'streamerctl config init' first.")
        raise SystemExit(1)

    data = {
        "config_file": str(CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "output_format": cfg.output_format,
        "profiles": list(cfg.profiles.keys()),
    }

    if output == "json":
        # Passwords stay out of the output even when stored
        data["profile_details"] = {
            name: {k: v for k, v in p.to_dict().items() if k != "password"}
            for name, p in cfg.profiles.items()
        }
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(data, title="Configuration")
    click.echo()
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "url": profile.url,
                "username": profile.username or "-",
                "verify_ssl": profile.verify_ssl,
                "default_project": profile.default_project or "-",
            }
        )
        click.echo()


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        streamerctl config use-context lab
    """
    cfg = _load_config()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save()

    print_success(f"Switched to profile '{profile}'")


@config.command("current-context")
def config_current_context() -> None:
    """Show the current active profile."""
    cfg = _load_config()

    if not cfg.profiles:
        print_error("No configuration found.")
        raise SystemExit(1)

    click.echo(cfg.default_profile)


@config.command("add-profile")
@click.argument("name")
@click.option("--url", required=True, help="Streamer server URL")
@click.option("--username", "-u", default=None, help="Default username")
@click.option("--project", default=None, help="Default project number")
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
def config_add_profile(
    name: str,
    url: str,
    username: Optional[str],
    project: Optional[str],
    no_verify_ssl: bool,
) -> None:
    """Add a new profile.

    Example:
        streamerctl config add-profile lab --url https://streamer.lab.example.org
    """
    url = _checked_url(url)
    cfg = _load_config()

    if cfg.has_profile(name):
        print_error(f"Profile '{name}' already exists.")
        raise SystemExit(1)

    cfg.add_profile(
        name=name,
        url=url,
        verify_ssl=not no_verify_ssl,
        default_project=project,
        username=username,
    )
    if len(cfg.profiles) == 1:
        cfg.default_profile = name
    cfg.save()

    print_success(f"Profile '{name}' added")


@config.command("remove-profile")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def config_remove_profile(name: str, yes: bool) -> None:
    """Remove a profile.

    Example:
        streamerctl config remove-profile lab
    """
    cfg = _load_config()

    if not cfg.has_profile(name):
        print_error(f"Profile '{name}' not found.")
        raise SystemExit(1)

    if name == cfg.default_profile:
        print_error("Cannot remove the default profile. Switch to another profile first.")
        raise SystemExit(1)

    if not yes:
        click.confirm(f"Remove profile '{name}'?", abort=True)

    cfg.remove_profile(name)
    cfg.save()

    print_success(f"Profile '{name}' removed")
