"""Unit tests for the expiry policy in expiry.py.

Test coverage includes:

1. ensure_utc() normalization
2. is_expired() boundary: a link is expired from its expiry instant onwards
3. expiry_from_ttl() with timedelta and seconds, rejecting negative TTLs
"""

from datetime import datetime, timedelta, timezone, UTC

import pytest

from ttlshortener.models import MappingModel
from ttlshortener.utils.expiry import ensure_utc, is_expired, expiry_from_ttl


EXPIRES_AT = datetime(2025, 11, 14, tzinfo=UTC)


def mapping_expiring_at(expires_at):
    return MappingModel(identifier='aB3xY9', target='https://example.com', expires_at=expires_at)


# -------------------------------
# 1. ensure_utc()
# -------------------------------


def test_ensure_utc_attaches_utc_to_naive():
    assert ensure_utc(datetime(2025, 11, 14)) == EXPIRES_AT
    assert ensure_utc(datetime(2025, 11, 14)).tzinfo is UTC


def test_ensure_utc_converts_aware():
    local = datetime(2025, 11, 14, 2, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(local) == EXPIRES_AT
    assert ensure_utc(local).utcoffset() == timedelta(0)


# -------------------------------
# 2. is_expired()
# -------------------------------


@pytest.mark.parametrize(
    'now, expected',
    [
        (EXPIRES_AT - timedelta(microseconds=1), False),
        (EXPIRES_AT, True),
        (EXPIRES_AT + timedelta(days=1), True),
    ],
)
def test_is_expired_boundary(now, expected):
    assert is_expired(mapping_expiring_at(EXPIRES_AT), now) is expected


def test_is_expired_mixes_naive_and_aware():
    assert is_expired(mapping_expiring_at(datetime(2025, 11, 14)), EXPIRES_AT)
    assert not is_expired(mapping_expiring_at(EXPIRES_AT), datetime(2025, 11, 13))


# -------------------------------
# 3. expiry_from_ttl()
# -------------------------------


@pytest.mark.parametrize(
    'ttl, expected',
    [
        (timedelta(days=30), EXPIRES_AT),
        (30 * 86_400, EXPIRES_AT),
        (timedelta(0), datetime(2025, 10, 15, tzinfo=UTC)),
    ],
)
def test_expiry_from_ttl(ttl, expected):
    assert expiry_from_ttl(datetime(2025, 10, 15, tzinfo=UTC), ttl) == expected


@pytest.mark.parametrize('ttl', [timedelta(seconds=-1), -1])
def test_expiry_from_negative_ttl(ttl):
    with pytest.raises(ValueError, match='TTL must not be negative'):
        expiry_from_ttl(datetime(2025, 10, 15, tzinfo=UTC), ttl)
