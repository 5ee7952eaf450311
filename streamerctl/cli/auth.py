"""Authentication commands for streamerctl."""

from __future__ import annotations

import click

from streamerctl.core.auth import AuthManager
from streamerctl.core.client import StreamerClient
from streamerctl.core.config import Config
from streamerctl.core.exceptions import (
    AuthenticationError,
    ConnectionError,
    ProfileNotFoundError,
)
from streamerctl.core.output import (
    ConsoleErrorReporter,
    print_error,
    print_json,
    print_key_value,
    print_success,
    print_warning,
)


@click.group()
def auth() -> None:
    """Manage authentication credentials."""
    pass


@auth.command("login")
@click.option("--profile", "-p", "profile_name", help="Profile to authenticate")
@click.option("--username", "-u", help="Username")
@click.option("--password", help="Password (will prompt if not provided)")
@click.option("--output", "-o", type=click.Choice(["table", "json"]), default="table")
def auth_login(
    profile_name: str | None,
    username: str | None,
    password: str | None,
    output: str,
) -> None:
    """Log in and remember who logged in.

    Checks the credentials against the server's login endpoint and caches
    the username and session cookies. The password is never cached.
    Credentials come from environment variables (STREAMER_USER, STREAMER_PASS).

    Example:
        streamerctl auth login
        streamerctl auth login --profile lab
        streamerctl auth login -u alice
    """
    config = Config.load()
    auth_mgr = AuthManager()

    try:
        profile = config.get_profile(profile_name)
    except ProfileNotFoundError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    # CLI args > env vars > profile config > prompt
    env_user, env_pass = auth_mgr.get_credentials()
    user = username or env_user or profile.username
    pwd = password or env_pass or profile.password

    if not user:
        user = click.prompt("Username")

    if not pwd:
        pwd = click.prompt("Password", hide_input=True)

    click.echo(f"Authenticating with {profile.url}...")

    client = StreamerClient(base_url=profile.url, verify_ssl=profile.verify_ssl)

    try:
        session = client.login(user, pwd)
        cached = auth_mgr.save_session(session)

        if output == "json":
            print_json(
                {
                    "status": "authenticated",
                    "username": cached.username,
                    "url": cached.url,
                    "expires_at": cached.expires_at.isoformat() if cached.expires_at else None,
                }
            )
        else:
            print_success(f"Logged in as {cached.username}")
            click.echo(f"Login cached until {cached.expires_at}")

    except AuthenticationError as e:
        auth_mgr.clear_session()
        ConsoleErrorReporter().report(str(e))
        raise SystemExit(2) from e
    except ConnectionError as e:
        ConsoleErrorReporter().report(str(e))
        raise SystemExit(3) from e
    finally:
        client.close()


@auth.command("logout")
def auth_logout() -> None:
    """Forget the cached login.

    Example:
        streamerctl auth logout
    """
    if AuthManager().clear_session():
        print_success("Logged out")
    else:
        print_warning("No cached login found")


@auth.command("status")
@click.option("--profile", "-p", "profile_name", help="Profile to check")
@click.option("--output", "-o", type=click.Choice(["table", "json"]), default="table")
def auth_status(profile_name: str | None, output: str) -> None:
    """Show where credentials would come from.

    Example:
        streamerctl auth status
        streamerctl auth status --profile lab
    """
    config = Config.load()
    auth_mgr = AuthManager()

    try:
        profile = config.get_profile(profile_name)
    except ProfileNotFoundError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    session_info = auth_mgr.get_session_info(profile.url)
    env_user, env_pass = auth_mgr.get_credentials()

    status = {
        "url": profile.url,
        "env_username": env_user or "(not set)",
        "env_password": "(set)" if env_pass else "(not set)",
        "profile_username": profile.username or "(not set)",
        "login_cached": session_info is not None,
    }

    if session_info:
        status.update(
            {
                "cached_username": session_info["username"],
                "cached_at": session_info["created_at"],
                "cache_expires": session_info["expires_at"],
            }
        )

    if output == "json":
        print_json(status)
    else:
        print_key_value(status, title="Authentication Status")
