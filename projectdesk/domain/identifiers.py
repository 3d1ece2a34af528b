"""Identifier formats for users and projects."""

import re
import secrets
import string
import time

USER_UUID_PATTERN = re.compile(r"^u-(\d+)$")
PROJECT_ID_PATTERN = re.compile(r"^proj-\d+-[a-z0-9]{6}$")

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 6
_UUID_MIN_DIGITS = 3


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def next_user_uuid(last_uuid: str | None) -> str:
    """Return the uuid after ``last_uuid`` (``u-001`` when there is none).

    Raises ValueError if ``last_uuid`` is not of the ``u-<digits>`` form.
    """
    if last_uuid is None:
        return f"u-{1:0{_UUID_MIN_DIGITS}d}"
    match = USER_UUID_PATTERN.match(last_uuid)
    if match is None:
        raise ValueError(f"Not a sequential user uuid: {last_uuid!r}")
    return f"u-{int(match.group(1)) + 1:0{_UUID_MIN_DIGITS}d}"


def fallback_user_uuid(now_ms: int | None = None) -> str:
    """Timestamp uuid used when the store cannot be scanned."""
    return f"u-{now_ms if now_ms is not None else _epoch_ms()}"


def generate_project_id(now_ms: int | None = None) -> str:
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"proj-{now_ms if now_ms is not None else _epoch_ms()}-{suffix}"
