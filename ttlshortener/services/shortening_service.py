"""Short link orchestration

ShorteningService ties together validation, deduplication, identifier
allocation, persistence and expiry. It is the only entry point Lambda handlers
use; they never talk to a DAO directly.

Operations:
    create(target, ttl_days=None) -> str
        Shorten a URL, reusing a live link to the same target if there is one.
    resolve(identifier) -> str
        Return the target of a live link; expired links are deleted on read.
    info(identifier) -> MappingModel
        Return the stored record as is, without expiry enforcement.
    list_active() -> list[MappingModel]
        All links which aren't expired right now, soonest expiry first.
    cleanup(now=None) -> int
        Sweep all links expired at `now`.

Example:
    >>> from ttlshortener.dao import MappingMemoryDAO
    >>> service = ShorteningService(MappingMemoryDAO())
    >>> identifier = service.create('https://example.com/docs', ttl_days=7)
    >>> service.resolve(identifier)
    'https://example.com/docs'
    >>> service.create('https://example.com/docs') == identifier
    True
"""

import logging
from datetime import datetime, timedelta, UTC

from beartype import beartype

from ttlshortener.constants import Defaults
from ttlshortener.models import MappingModel
from ttlshortener.dao.base import MappingBaseDAO
from ttlshortener.dao.exceptions import MappingAlreadyExistsError
from ttlshortener.exceptions import NotFoundError
from ttlshortener.services.allocator import IdentifierAllocator
from ttlshortener.utils.expiry import ensure_utc, expiry_from_ttl, is_expired
from ttlshortener.utils.shortener import IdentifierGenerator
from ttlshortener.utils.validators import validate_target, validate_ttl_days


logger = logging.getLogger(__name__)


class ShorteningService:
    """Create, resolve and reclaim expiring short links

    Attributes:
        dao (MappingBaseDAO):
            Mapping store.
        allocator (IdentifierAllocator):
            Produces identifiers not held by any stored record.
        default_ttl_days (int):
            TTL applied when create() gets no explicit one.
        max_attempts (int):
            Bound on identifier candidates per create(), shared between
            pre-check collisions and lost insert races.
    """

    def __init__(
        self,
        dao: MappingBaseDAO,
        generator: IdentifierGenerator | None = None,
        default_ttl_days: int = Defaults.TTL_DAYS,
        max_attempts: int = Defaults.MAX_ALLOCATION_ATTEMPTS,
    ):
        self.dao = dao
        self.default_ttl_days = validate_ttl_days(default_ttl_days)
        self.max_attempts = max_attempts
        self.allocator = IdentifierAllocator(dao, generator=generator, max_attempts=max_attempts)

    @beartype
    def create(self, target: str, ttl_days: int | None = None) -> str:
        """Shorten a target URL

        Steps:
            - Step 1: validate the target URL and TTL
            - Step 2: reuse a live link to the same target (no new record, no new TTL)
            - Step 3: allocate a fresh identifier and store the mapping;
                      re-allocate if the insert loses a race for the identifier

        Args:
            target (str):
                Absolute http(s) URL to shorten.
            ttl_days (int | None):
                Days until the link expires. Defaults to `default_ttl_days`.
                0 creates a link which is already expired.

        Returns:
            str: identifier of the (new or reused) link.

        Raises:
            InvalidInputError:
                If the target is not a well-formed absolute URL or the TTL is negative.
            ResourceExhaustedError:
                If no free identifier could be found within `max_attempts`.
            DataStoreError:
                If the mapping store is unreachable.
        """
        validate_target(target)
        ttl_days = self.default_ttl_days if ttl_days is None else validate_ttl_days(ttl_days)
        now = datetime.now(UTC)

        existing = self.dao.find_by_target(target, now=now)
        if existing is not None and not is_expired(existing, now):
            logger.info('Target already shortened, reusing live link.', extra={'identifier': existing.identifier})
            return existing.identifier

        expires_at = expiry_from_ttl(now, timedelta(days=ttl_days))
        # candidates() raises ResourceExhaustedError once the shared budget is spent
        for identifier in self.allocator.candidates():
            try:
                stored = self.dao.insert(MappingModel(identifier=identifier, target=target, expires_at=expires_at))
            except MappingAlreadyExistsError:
                # Another writer took the identifier between the pre-check and the insert
                logger.warning('Lost identifier race, allocating again.', extra={'identifier': identifier})
                continue

            logger.info(
                'Created short link.',
                extra={'identifier': stored.identifier, 'expires_at': stored.expires_at.isoformat()},
            )
            return stored.identifier

    @beartype
    def resolve(self, identifier: str) -> str:
        """Return the target URL of a live link

        An expired link is deleted on the spot (lazy reclamation) and reported
        exactly like a missing one.

        Raises:
            NotFoundError: If the identifier is unknown or its link has expired.
            DataStoreError: If the mapping store is unreachable.
        """
        mapping = self.dao.get(identifier)
        if mapping is None:
            logger.info('Identifier not found.', extra={'identifier': identifier})
            raise NotFoundError(f"Link '{identifier}' doesn't exist.")

        if is_expired(mapping, datetime.now(UTC)):
            removed = self.dao.delete(mapping)
            logger.info('Link expired, reclaimed on read.', extra={'identifier': identifier, 'removed': removed})
            raise NotFoundError(f"Link '{identifier}' doesn't exist.")

        return mapping.target

    @beartype
    def info(self, identifier: str) -> MappingModel:
        """Return the stored record for an identifier, expired or not, without side effects

        Raises:
            NotFoundError: If no record holds the identifier.
        """
        mapping = self.dao.get(identifier)
        if mapping is None:
            raise NotFoundError(f"Link '{identifier}' doesn't exist.")
        return mapping

    def list_active(self) -> list[MappingModel]:
        """Return every link which isn't expired right now, soonest expiry first"""
        return sorted(self.dao.active(datetime.now(UTC)), key=lambda mapping: ensure_utc(mapping.expires_at))

    @beartype
    def cleanup(self, now: datetime | None = None) -> int:
        """Delete every link expired at `now` (defaults to the current time)

        Returns:
            int: number of links removed; 0 when nothing was expired.
        """
        now = datetime.now(UTC) if now is None else ensure_utc(now)
        removed = self.dao.delete_expired(now)
        logger.info('Cleaned up expired links.', extra={'removed': removed, 'now': now.isoformat()})
        return removed
