"""Data Access Object (DAO) implementation for managing link mappings in Redis

This module provides a Redis-based implementation of MappingBaseDAO for CRUD-like
operations with MappingModel instances.

Responsibilities:
    - Insert and retrieve mappings from Redis, enforcing identifier uniqueness;
    - Maintain the expiry index (sorted set) and the target URL index (sets);
    - Delete single mappings and sweep expired ones without racing re-created records;
    - Raise DataStoreError on connectivity issues with Redis.

Classes:
    MappingRedisDAO:
        DAO for storing and retrieving MappingModel in a Redis datastore.

Example:
    >>> from datetime import datetime, timedelta, UTC
    >>> from ttlshortener.models import MappingModel
    >>> from ttlshortener.dao.redis import MappingRedisDAO

    >>> dao = MappingRedisDAO(prefix="app:dev")

    >>> mapping = MappingModel(
    ...     identifier="aB3xY9",
    ...     target="https://example.com/page",
    ...     expires_at=datetime.now(UTC) + timedelta(days=30),
    ... )
    >>> dao.insert(mapping)
    MappingModel(identifier='aB3xY9', target='https://example.com/page', ...)

    >>> dao.get("aB3xY9").target
    'https://example.com/page'
    >>> dao.find_by_target("https://example.com/page").identifier
    'aB3xY9'
    >>> dao.delete_expired(datetime.now(UTC) + timedelta(days=31))
    1
"""

import json
from collections.abc import Callable, Iterable
from datetime import datetime, UTC

import redis
from beartype import beartype

from ttlshortener.constants import TTL
from ttlshortener.models import MappingModel
from ttlshortener.dao.base import MappingBaseDAO
from ttlshortener.dao.redis.mixins import RedisClientMixin
from ttlshortener.dao.redis.helpers import handle_redis_connection_error
from ttlshortener.dao.exceptions import MappingAlreadyExistsError
from ttlshortener.utils.expiry import ensure_utc, is_expired


class MappingRedisDAO(RedisClientMixin, MappingBaseDAO):
    """Redis-based Data Access Object (DAO) for managing link mappings

    This class implements the MappingBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        insert(mapping: MappingModel, **kwargs) -> MappingModel:
            Store a mapping with SET NX and register it in both indexes.
            Raises MappingAlreadyExistsError when the identifier is taken.

        get(identifier: str, **kwargs) -> MappingModel | None:
            Retrieve a mapping by identifier.

        exists(identifier: str, **kwargs) -> bool:
            Check whether a mapping with the identifier is stored.

        find_by_target(target: str, now: datetime | None = None, **kwargs) -> MappingModel | None:
            Retrieve the latest-expiring mapping for a target URL.

        delete(mapping: MappingModel, **kwargs) -> bool:
            Remove a mapping if the stored record is the same incarnation.

        expired(now: datetime, **kwargs) -> list[MappingModel]:
        active(now: datetime, **kwargs) -> list[MappingModel]:
            List mappings on either side of the expiry boundary.

        delete_expired(now: datetime, **kwargs) -> int:
            Sweep all mappings expired at `now`.

        All methods raise DataStoreError on connectivity issues with Redis.
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, mapping: MappingModel, **kwargs) -> MappingModel:
        """Insert a mapping into Redis

        The record key is written with SET NX, which makes Redis the authority
        on identifier uniqueness: of two concurrent inserts with the same
        identifier exactly one succeeds. The key also gets a retention backstop
        (expiry + RETENTION_GRACE) so records are eventually dropped even if
        no sweep ever runs.

        Args:
            mapping (MappingModel):
                MappingModel instance to store. Its created_at/updated_at are
                overwritten with the insertion time.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            MappingModel: the stored mapping, carrying creation metadata.

        Raises:
            MappingAlreadyExistsError:
                If a mapping with the same identifier already exists.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        stored = mapping.stamped(datetime.now(UTC))
        expires_at = ensure_utc(stored.expires_at)
        link_key = self.keys.link_key(stored.identifier)
        retain_until = int(expires_at.timestamp()) + TTL.RETENTION_GRACE

        created = self.redis.set(link_key, json.dumps(stored.to_dict()), nx=True, exat=retain_until)
        if not created:
            raise MappingAlreadyExistsError(f"Mapping with identifier '{stored.identifier}' already exists.")

        # NOTE: Index writes happen after SET NX succeeded. A reader between the two
        #       steps sees the record via get() but not via find_by_target() or the
        #       expiry listings, which at worst causes a tolerated duplicate link for
        #       the same target.
        # NOTE: The target set lives as long as its longest-retained member: NX gives a
        #       fresh set its first expiry, GT only ever pushes an existing one later.
        target_key = self.keys.target_index_key(stored.target)
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.zadd(self.keys.expiry_index_key(), {stored.identifier: expires_at.timestamp()})
            pipe.sadd(target_key, stored.identifier)
            pipe.expireat(target_key, retain_until, nx=True)
            pipe.expireat(target_key, retain_until, gt=True)
            pipe.execute()
        return stored

    @handle_redis_connection_error
    @beartype
    def get(self, identifier: str, **kwargs) -> MappingModel | None:
        """Retrieve a stored mapping by identifier

        Example:
            >>> dao.get('aB3xY9')
            MappingModel(identifier='aB3xY9', target='https://example.com', ...)
        """
        raw = self.redis.get(self.keys.link_key(identifier))
        return None if raw is None else self._decode(raw)

    @handle_redis_connection_error
    @beartype
    def exists(self, identifier: str, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.link_key(identifier)))

    @handle_redis_connection_error
    @beartype
    def find_by_target(self, target: str, now: datetime | None = None, **kwargs) -> MappingModel | None:
        """Retrieve a mapping for the target URL

        Several historical mappings may share a target. Only candidates whose
        stored target matches exactly are considered (the index key is a hash),
        expired candidates are skipped when `now` is given, and the one with the
        latest expiry wins. Index members whose record is gone (retention
        backstop) are pruned from the target index on the way.
        """
        index_key = self.keys.target_index_key(target)
        records = self._fetch(sorted(self.redis.smembers(index_key)))

        vanished = [identifier for identifier, mapping in records if mapping is None]
        if vanished:
            self.redis.srem(index_key, *vanished)

        candidates = [mapping for _, mapping in records if mapping is not None and mapping.target == target]
        if now is not None:
            candidates = [mapping for mapping in candidates if not is_expired(mapping, now)]
        return max(candidates, key=lambda mapping: ensure_utc(mapping.expires_at), default=None)

    @handle_redis_connection_error
    @beartype
    def delete(self, mapping: MappingModel, **kwargs) -> bool:
        """Delete a single mapping

        Only the same incarnation of the record is deleted: if the identifier was
        reclaimed and re-issued in the meantime, the new record is left intact.

        Returns:
            bool: True if this call removed the record.
        """

        def same_incarnation(stored: MappingModel) -> bool:
            return mapping.created_at is None or stored.created_at == mapping.created_at

        return self._remove(mapping.identifier, same_incarnation)

    @handle_redis_connection_error
    @beartype
    def expired(self, now: datetime, **kwargs) -> list[MappingModel]:
        identifiers = self.redis.zrangebyscore(self.keys.expiry_index_key(), '-inf', ensure_utc(now).timestamp())
        return [mapping for mapping in self._load(identifiers) if is_expired(mapping, now)]

    @handle_redis_connection_error
    @beartype
    def active(self, now: datetime, **kwargs) -> list[MappingModel]:
        identifiers = self.redis.zrangebyscore(self.keys.expiry_index_key(), f'({ensure_utc(now).timestamp()}', '+inf')
        return [mapping for mapping in self._load(identifiers) if not is_expired(mapping, now)]

    @handle_redis_connection_error
    @beartype
    def delete_expired(self, now: datetime, **kwargs) -> int:
        """Sweep all mappings expired at `now`

        Candidates come from the expiry index; each one is then removed in its
        own optimistic transaction which re-checks expiry under WATCH. Records
        deleted or re-created concurrently are skipped and not counted.

        Returns:
            int: number of records removed by this sweep.

        Example:
            >>> dao.delete_expired(datetime.now(UTC))
            3
            >>> dao.delete_expired(datetime.now(UTC))
            0
        """
        identifiers = self.redis.zrangebyscore(self.keys.expiry_index_key(), '-inf', ensure_utc(now).timestamp())
        return sum(1 for identifier in identifiers if self._remove(identifier, lambda stored: is_expired(stored, now)))

    def _decode(self, raw: str | bytes) -> MappingModel:
        return MappingModel.from_dict(json.loads(raw))

    def _fetch(self, identifiers: Iterable[str]) -> list[tuple[str, MappingModel | None]]:
        """MGET the records of the given identifiers, pairing each with its record or None."""
        identifiers = list(identifiers)
        if not identifiers:
            return []
        raws = self.redis.mget([self.keys.link_key(identifier) for identifier in identifiers])
        return [(identifier, None if raw is None else self._decode(raw)) for identifier, raw in zip(identifiers, raws)]

    def _load(self, identifiers: Iterable[str]) -> list[MappingModel]:
        """MGET the records of the given identifiers, skipping the ones already gone."""
        return [mapping for _, mapping in self._fetch(identifiers) if mapping is not None]

    def _remove(self, identifier: str, should_remove: Callable[[MappingModel], bool]) -> bool:
        """Atomically remove a record and its index entries if `should_remove` agrees

        NOTE: WATCH on the record key aborts the transaction if the record is
              modified between the read and EXEC, e.g. (sweep) reads an expired
              record -> (lazy resolve) deletes it -> (create) re-issues the same
              identifier -> (sweep) EXEC. The sweep then skips the new record.
              A record which already vanished (retention backstop) still has its expiry
              index entry dropped without counting as a removal; its target index entry
              is pruned by find_by_target() or expires with the target set.
        """
        link_key = self.keys.link_key(identifier)
        with self.redis.pipeline() as pipe:
            try:
                pipe.watch(link_key)
                raw = pipe.get(link_key)
                stored = None if raw is None else self._decode(raw)
                if stored is not None and not should_remove(stored):
                    pipe.unwatch()
                    return False

                pipe.multi()
                pipe.delete(link_key)
                pipe.zrem(self.keys.expiry_index_key(), identifier)
                if stored is not None:
                    pipe.srem(self.keys.target_index_key(stored.target), identifier)
                pipe.execute()
            except redis.exceptions.WatchError:
                return False
        return stored is not None
