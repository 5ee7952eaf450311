"""Authentication state for streamerctl.

``AuthSession`` is the read-only credential value handed to every request.
``AuthManager`` caches who logged in (never the password) between CLI runs.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from streamerctl.core.config import CONFIG_DIR, ENV_PASS, ENV_USER

# =============================================================================
# Constants
# =============================================================================

SESSION_CACHE_FILE = CONFIG_DIR / ".session"
SESSION_EXPIRY_HOURS = 12


# =============================================================================
# AuthSession
# =============================================================================


@dataclass(frozen=True)
class AuthSession:
    """Authenticated credentials shared by all requests of a run."""

    url: str
    username: str
    password: str = field(repr=False)
    cookies: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cookies", MappingProxyType(dict(self.cookies)))

    @property
    def basic_auth(self) -> tuple[str, str]:
        """Basic auth tuple sent with every request."""
        return (self.username, self.password)


# =============================================================================
# Session Cache
# =============================================================================


@dataclass
class CachedSession:
    """Cached login record with metadata."""

    url: str
    username: str
    created_at: datetime
    expires_at: datetime | None = None
    cookies: dict[str, str] = field(default_factory=dict)

    def is_expired(self) -> bool:
        """Check if session has expired."""
        if self.expires_at:
            return datetime.now() >= self.expires_at
        return False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "username": self.username,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "cookies": dict(self.cookies),
        }

    @classmethod
    def from_dict(cls, data: dict) -> CachedSession:
        """Create from dictionary."""
        return cls(
            url=data["url"],
            username=data["username"],
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=(
                datetime.fromisoformat(data["expires_at"]) if data.get("expires_at") else None
            ),
            cookies=dict(data.get("cookies") or {}),
        )


# =============================================================================
# AuthManager
# =============================================================================


class AuthManager:
    """Manages credentials from the environment and the login cache."""

    def __init__(self, cache_file: Path | None = None):
        self.cache_file = cache_file or SESSION_CACHE_FILE

    def get_credentials(self) -> tuple[str | None, str | None]:
        """Get credentials from environment variables."""
        return os.getenv(ENV_USER), os.getenv(ENV_PASS)

    def save_session(
        self,
        session: AuthSession,
        expiry_hours: int = SESSION_EXPIRY_HOURS,
    ) -> CachedSession:
        """Cache a successful login.

        Args:
            session: Session returned by a successful login.
            expiry_hours: Hours until the cached login is considered expired.

        Returns:
            Cached session record.
        """
        now = datetime.now()
        cached = CachedSession(
            url=session.url,
            username=session.username,
            created_at=now,
            expires_at=now + timedelta(hours=expiry_hours),
            cookies=dict(session.cookies),
        )

        self.cache_file.parent.mkdir(parents=True, exist_ok=True)

        with open(self.cache_file, "w") as f:
            json.dump(cached.to_dict(), f)

        # Owner read/write only
        try:
            os.chmod(self.cache_file, 0o600)
        except OSError:
            pass  # May fail on some systems

        return cached

    def load_session(self, url: str | None = None) -> CachedSession | None:
        """Load the cached login.

        Args:
            url: Optional URL to match. If provided, only returns session for that URL.

        Returns:
            Cached session if valid, None otherwise.
        """
        if not self.cache_file.exists():
            return None

        try:
            with open(self.cache_file) as f:
                data = json.load(f)

            cached = CachedSession.from_dict(data)

            if url and cached.url != url:
                return None

            if cached.is_expired():
                self.clear_session()
                return None

            return cached

        except (json.JSONDecodeError, KeyError, ValueError):
            # Invalid cache file
            self.clear_session()
            return None

    def clear_session(self) -> bool:
        """Clear cached login.

        Returns:
            True if cache was cleared.
        """
        if self.cache_file.exists():
            try:
                self.cache_file.unlink()
                return True
            except OSError:
                pass
        return False

    def get_session_info(self, url: str | None = None) -> dict | None:
        """Get cached login information for display."""
        cached = self.load_session(url)
        if not cached:
            return None

        return {
            "url": cached.url,
            "username": cached.username,
            "created_at": cached.created_at.isoformat(),
            "expires_at": cached.expires_at.isoformat() if cached.expires_at else None,
            "is_expired": cached.is_expired(),
        }
