"""Expiry policy for stored mappings

A mapping is expired from its expiry instant onwards: `now >= expires_at`.
The same predicate backs lookups, dedup checks, listings and the bulk sweep,
so a record resolvable at some instant is never swept at that same instant.

Functions:
    ensure_utc(value) -> datetime
        Attach UTC to naive datetimes, convert aware ones to UTC.
    is_expired(mapping, now) -> bool
        True if the mapping is expired at `now`.
    expiry_from_ttl(now, ttl) -> datetime
        Compute an expiry instant from a TTL.

Example:
    >>> from datetime import datetime, timedelta, UTC
    >>> now = datetime(2025, 10, 15, tzinfo=UTC)
    >>> expires_at = expiry_from_ttl(now, timedelta(days=30))
    >>> expires_at
    datetime.datetime(2025, 11, 14, 0, 0, tzinfo=datetime.timezone.utc)
"""

from datetime import datetime, timedelta, UTC

from ttlshortener.models import MappingModel


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def is_expired(mapping: MappingModel, now: datetime) -> bool:
    return ensure_utc(now) >= ensure_utc(mapping.expires_at)


def expiry_from_ttl(now: datetime, ttl: timedelta | int) -> datetime:
    """Compute the expiry instant of a link created at `now`

    Args:
        now (datetime):
            Creation moment.
        ttl (timedelta | int):
            Lifetime of the link, either a timedelta or a number of seconds.

    Returns:
        datetime: `now + ttl` in UTC.

    Raises:
        ValueError: If the TTL is negative.
    """
    if isinstance(ttl, int):
        ttl = timedelta(seconds=ttl)
    if ttl < timedelta(0):
        raise ValueError(f'TTL must not be negative (given value: {ttl}).')
    return ensure_utc(now) + ttl
