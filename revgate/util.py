"""
Small utilities shared by the revision and approval layers.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Callable


Clock = Callable[[], datetime]

# Crockford base32: no I, L, O or U.
_ID_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_ID_LENGTH = 26
_RANDOM_BITS = 80


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id(*, now: datetime | None = None) -> str:
    """
    Time-ordered id for revisions and approvals.

    26 base32 characters: a 48-bit millisecond timestamp followed by 80
    random bits (the ULID layout). Ids created later sort later.
    """
    millis = int((now or utc_now()).timestamp() * 1000)
    if not 0 <= millis < 1 << 48:
        raise ValueError(f"timestamp out of range for an id: {millis}")

    value = (millis << _RANDOM_BITS) | secrets.randbits(_RANDOM_BITS)
    shifts = range(5 * (_ID_LENGTH - 1), -1, -5)
    return "".join(_ID_ALPHABET[(value >> shift) & 0x1F] for shift in shifts)


def format_timestamp(dt: datetime) -> str:
    return dt.isoformat()


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a stored ISO timestamp; values without an offset are taken as UTC."""
    if not value:
        return None
    # Stored values written by other producers may carry a trailing "Z".
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
