"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, NoReturn, Optional, TypeVar

import click

from streamerctl.core.auth import AuthManager, AuthSession
from streamerctl.core.client import StreamerClient
from streamerctl.core.config import Config, Profile, get_credentials
from streamerctl.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    ProfileNotFoundError,
    StreamerError,
)
from streamerctl.core.logging import get_logger, setup_logging
from streamerctl.core.output import ConsoleErrorReporter, ErrorReporter, OutputFormat

F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger(__name__)


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    NETWORK_ERROR = 3
    PERMISSION_ERROR = 4
    USER_CANCELLED = 5


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.client: Optional[StreamerClient] = None
        self.session: Optional[AuthSession] = None
        self.profile_name: Optional[str] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False
        self.auth_manager: AuthManager = AuthManager()
        self.reporter: ErrorReporter = ConsoleErrorReporter()

    def get_profile(self) -> Profile:
        """Get the active profile.

        Raises:
            ConfigurationError: If no profile configured.
        """
        if self.config is None:
            self.config = Config.load()

        try:
            return self.config.get_profile(self.profile_name)
        except ProfileNotFoundError as e:
            raise ConfigurationError(
                f"Profile '{self.profile_name or self.config.default_profile}' not found. "
                "Run 'streamerctl config init' to create one."
            ) from e

    def get_client(self) -> StreamerClient:
        """Get or create the client for the active profile."""
        if self.client is not None:
            return self.client

        profile = self.get_profile()
        self.client = StreamerClient(base_url=profile.url, verify_ssl=profile.verify_ssl)
        return self.client

    def get_session(self) -> AuthSession:
        """Log in with the resolved credentials, once per run.

        Credentials come from env vars, then the profile, then a prompt.
        A failed login clears any cached login.

        Raises:
            AuthenticationError: If the server rejects the credentials.
        """
        if self.session is not None:
            return self.session

        profile = self.get_profile()
        client = self.get_client()

        env_user, env_pass = get_credentials()
        cached = self.auth_manager.load_session(client.base_url)
        username = env_user or profile.username or (cached.username if cached else None)
        password = env_pass or profile.password

        if not username:
            username = click.prompt("Username", err=True)
        if not password:
            password = click.prompt("Password", hide_input=True, err=True)

        try:
            self.session = client.login(username, password)
        except AuthenticationError:
            self.auth_manager.clear_session()
            raise

        return self.session


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="STREAMER_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default="table",
        help="Output format",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Minimal output",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose output",
    )
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        output_format: str,
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Populate context from global options and invoke the command."""
        ctx.profile_name = profile
        ctx.output_format = OutputFormat.from_string(output_format)
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)

        try:
            ctx.config = Config.load()
        except ConfigurationError as e:
            exit_for_error(e)

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Error Handling
# =============================================================================


def exit_for_error(e: Exception) -> NoReturn:
    """Report an error through the error reporter and exit with a matching code."""
    reporter = ConsoleErrorReporter()
    if not isinstance(e, StreamerError):
        logger.debug("Unhandled error", exc_info=e)
        reporter.report(f"Unexpected error: {e}")
        sys.exit(ExitCode.GENERAL_ERROR)

    reporter.report(str(e))
    if isinstance(e, AuthenticationError):
        sys.exit(ExitCode.AUTH_ERROR)
    if isinstance(e, ConnectionError):
        sys.exit(ExitCode.NETWORK_ERROR)
    sys.exit(ExitCode.GENERAL_ERROR)


# =============================================================================
# Authentication Decorators
# =============================================================================


def require_auth(f: F) -> F:
    """Log in before running the command."""

    @wraps(f)
    def wrapper(ctx: Context, *args: Any, **kwargs: Any) -> Any:
        """Ensure the context holds a session before running."""
        try:
            ctx.get_session()
        except StreamerError as e:
            exit_for_error(e)
        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


def handle_errors(f: F) -> F:
    """Turn errors raised by a command into a report and an exit code."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Capture errors and exit with consistent messaging."""
        try:
            return f(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as e:
            exit_for_error(e)

    return wrapper  # type: ignore
