"""Capability token generation and expiry evaluation.

Every token check goes through `is_expired`: a token is valid while
`now < expires_at`, and the expiry instant itself counts as expired.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

DEFAULT_REPORT_LINK_TTL_HOURS = 24.0
DEFAULT_DEMO_SESSION_TTL_HOURS = 1.0


def new_token() -> str:
    return str(uuid4())


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    return _as_utc(datetime.fromisoformat(raw))


def compute_expiry(ttl_hours: float, *, now: datetime | None = None) -> str:
    if ttl_hours <= 0:
        raise ValueError("ttl_hours must be > 0")
    reference = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return (reference + timedelta(hours=float(ttl_hours))).isoformat()


def is_expired(expires_at: str, *, now: datetime | None = None) -> bool:
    reference = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return parse_timestamp(expires_at) <= reference
