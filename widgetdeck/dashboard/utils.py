"""Identifier and timestamp helpers shared by the repositories."""

from __future__ import annotations

import secrets
import time
from datetime import UTC, datetime


def new_id(prefix: str) -> str:
    """Time-based identifier with a random suffix, e.g. ``widget-1760862600123-9f2c1a``."""
    return f"{prefix}-{time.time_ns() // 1_000_000}-{secrets.token_hex(3)}"


def now_iso() -> str:
    """Current UTC time as stored in ``createdAt`` / ``updatedAt``."""
    return to_iso(datetime.now(UTC))


def to_iso(value: datetime) -> str:
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str | datetime | None) -> datetime:
    """Parse a stored timestamp.  Missing values fall back to *now*."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not value:
        return datetime.now(UTC)
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
