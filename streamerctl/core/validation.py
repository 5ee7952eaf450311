"""Input validation for streamerctl.

The label predicates are pure: they never raise and never touch state.
``resolve_label_input`` implements the keep-or-clear rule callers apply
when a candidate is rejected.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from urllib.parse import urlparse

from streamerctl.core.exceptions import InvalidLabelError, InvalidURLError

# =============================================================================
# Patterns
# =============================================================================

SUBJECT_LABEL_PATTERN = "[a-zA-Z0-9]+"
SESSION_LABEL_PATTERN = "[a-zA-Z0-9]+"
DATA_TYPE_OTHER_PATTERN = "[a-z]+"

_SUBJECT_LABEL_RE = re.compile(SUBJECT_LABEL_PATTERN)
_SESSION_LABEL_RE = re.compile(SESSION_LABEL_PATTERN)
_DATA_TYPE_OTHER_RE = re.compile(DATA_TYPE_OTHER_PATTERN)

ALLOWED_SCHEMES = ("http", "https")


# =============================================================================
# Label Predicates
# =============================================================================


def is_valid_subject_label(value: str) -> bool:
    """Return True if value is a non-empty alphanumeric subject label."""
    return bool(value) and _SUBJECT_LABEL_RE.fullmatch(value) is not None


def is_valid_session_label(value: str) -> bool:
    """Return True if value is a non-empty alphanumeric session label."""
    return bool(value) and _SESSION_LABEL_RE.fullmatch(value) is not None


def is_valid_data_type_other(value: str) -> bool:
    """Return True if value is a non-empty lower-case free-text data type."""
    return bool(value) and _DATA_TYPE_OTHER_RE.fullmatch(value) is not None


def resolve_label_input(
    candidate: str,
    previous: str,
    predicate: Callable[[str], bool],
) -> tuple[bool, str]:
    """Decide which value a text field keeps after an edit.

    Args:
        candidate: Text the user just entered.
        previous: Value currently held by the field.
        predicate: Validity check for this field.

    Returns:
        Tuple of (is_valid, value_to_store). A valid candidate is stored
        as-is. An invalid non-empty candidate keeps ``previous``; an empty
        candidate clears the field.
    """
    if predicate(candidate):
        return True, candidate
    if candidate != "":
        return False, previous
    return False, ""


# =============================================================================
# Raising Validators
# =============================================================================


def validate_subject_label(value: str) -> str:
    """Validate a subject label.

    Raises:
        InvalidLabelError: If the label is empty or not alphanumeric.
    """
    if not is_valid_subject_label(value):
        raise InvalidLabelError("subject label", value, SUBJECT_LABEL_PATTERN)
    return value


def validate_session_label(value: str) -> str:
    """Validate a session label.

    Raises:
        InvalidLabelError: If the label is empty or not alphanumeric.
    """
    if not is_valid_session_label(value):
        raise InvalidLabelError("session label", value, SESSION_LABEL_PATTERN)
    return value


def validate_data_type_other(value: str) -> str:
    """Validate free-text data type.

    Raises:
        InvalidLabelError: If the text is empty or not lower-case letters.
    """
    if not is_valid_data_type_other(value):
        raise InvalidLabelError("other data type", value, DATA_TYPE_OTHER_PATTERN)
    return value


# =============================================================================
# URL Validation
# =============================================================================


def validate_server_url(url: str) -> str:
    """Validate and normalize a server URL.

    Args:
        url: URL to validate.

    Returns:
        URL with surrounding whitespace and trailing slashes removed.

    Raises:
        InvalidURLError: If the URL is empty, lacks a scheme or hostname,
            or uses an unsupported scheme.
    """
    if not url or not url.strip():
        raise InvalidURLError(str(url), "URL cannot be empty")

    url = url.strip()
    parsed = urlparse(url)

    if not parsed.scheme:
        raise InvalidURLError(url, "URL must include scheme (http:// or https://)")
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise InvalidURLError(url, f"Unsupported scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise InvalidURLError(url, "URL must include hostname")

    return url.rstrip("/")
