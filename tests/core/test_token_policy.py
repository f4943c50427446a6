from datetime import datetime, timedelta, timezone

import pytest

from src.sara.core.token_policy import compute_expiry, is_expired, new_token, parse_timestamp

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_new_tokens_are_unique():
    assert len({new_token() for _ in range(50)}) == 50


def test_compute_expiry_adds_ttl():
    assert parse_timestamp(compute_expiry(24, now=NOW)) == NOW + timedelta(hours=24)
    assert parse_timestamp(compute_expiry(0.5, now=NOW)) == NOW + timedelta(minutes=30)


def test_compute_expiry_rejects_non_positive_ttl():
    with pytest.raises(ValueError):
        compute_expiry(0, now=NOW)


def test_expiry_boundary_instant_is_expired():
    expires_at = NOW.isoformat()
    assert is_expired(expires_at, now=NOW) is True
    assert is_expired(expires_at, now=NOW - timedelta(microseconds=1)) is False
    assert is_expired(expires_at, now=NOW + timedelta(seconds=1)) is True


def test_parse_timestamp_accepts_z_suffix_and_naive_values():
    assert parse_timestamp("2025-06-01T12:00:00Z") == NOW
    assert parse_timestamp("2025-06-01T12:00:00") == NOW
    assert is_expired("2025-06-01T12:00:00.000Z", now=NOW) is True
