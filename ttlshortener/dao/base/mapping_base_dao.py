"""Abstract base class for mapping data access objects (DAOs).

This class establishes a consistent contract for all mapping DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-process memory).

Responsibilities:
    - Provide an interface for inserting, retrieving and deleting MappingModel objects.
    - Provide secondary lookup by target URL and bulk expiry queries.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from datetime import datetime, timedelta, UTC
        >>> from ttlshortener.models import MappingModel
        >>> from ttlshortener.dao.redis import MappingRedisDAO

        >>> dao = MappingRedisDAO(...)

        >>> mapping = MappingModel(
        ...     identifier='aB3xY9',
        ...     target='https://example.com/blog/article-123',
        ...     expires_at=datetime.now(UTC) + timedelta(days=30),
        ... )
        >>> stored = dao.insert(mapping)
        >>> stored.created_at is not None
        True

        >>> dao.get('aB3xY9').target
        'https://example.com/blog/article-123'

        >>> dao.delete_expired(datetime.now(UTC) + timedelta(days=31))
        1
"""

from abc import ABC, abstractmethod
from datetime import datetime

from ttlshortener.models import MappingModel


class MappingBaseDAO(ABC):
    """Interface for mapping data access objects (DAOs).

    Methods:
        insert(mapping: MappingModel, **kwargs) -> MappingModel:
            Insert a new MappingModel and assign its creation metadata.
            Raises MappingAlreadyExistsError if the identifier is already stored.

        get(identifier: str, **kwargs) -> MappingModel | None:
            Retrieve a MappingModel by identifier, expired or not.

        exists(identifier: str, **kwargs) -> bool:
            Check whether any record (expired or not) holds the identifier.

        find_by_target(target: str, now: datetime | None = None, **kwargs) -> MappingModel | None:
            Retrieve a record mapped to the target URL.

        delete(mapping: MappingModel, **kwargs) -> bool:
            Remove a single record.

        expired(now: datetime, **kwargs) -> list[MappingModel]:
            List records with expires_at <= now.

        active(now: datetime, **kwargs) -> list[MappingModel]:
            List records with expires_at > now.

        delete_expired(now: datetime, **kwargs) -> int:
            Remove all records with expires_at <= now and return how many were removed.

    Subclassing:
        Datastore-specific implementations (e.g., MappingRedisDAO or
        MappingMemoryDAO) must extend this class and implement all
        abstract methods. Every method raises DataStoreError on connection
        or read/write failure.

    NOTE:
        - Identifier uniqueness must be enforced atomically by insert() itself.
          exists() is a best-effort pre-check used to avoid wasted writes, not a lock.
    """

    @abstractmethod
    def insert(self, mapping: MappingModel, **kwargs) -> MappingModel:
        """Insert a new MappingModel into the data store.

        Args:
            mapping (MappingModel):
                The MappingModel instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            MappingModel: the stored record, with created_at and updated_at set.

        Raises:
            MappingAlreadyExistsError:
                If a MappingModel with the same identifier already exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, identifier: str, **kwargs) -> MappingModel | None:
        """Retrieve a MappingModel from the data store by its identifier.

        Expired records which haven't been reclaimed yet are returned as well.

        Returns:
            MappingModel | None: The MappingModel instance if found, otherwise None.
        """
        pass

    @abstractmethod
    def exists(self, identifier: str, **kwargs) -> bool:
        """Return True if any record holds the identifier, regardless of expiry."""
        pass

    @abstractmethod
    def find_by_target(self, target: str, now: datetime | None = None, **kwargs) -> MappingModel | None:
        """Retrieve a MappingModel mapped to the given target URL.

        Args:
            target (str):
                The original long URL.

            now (datetime | None):
                If given, only records which aren't expired at this moment qualify.

        Returns:
            MappingModel | None:
                The record with the latest expires_at among the candidates, or None.
        """
        pass

    @abstractmethod
    def delete(self, mapping: MappingModel, **kwargs) -> bool:
        """Delete a single record.

        The record is removed only if the stored record is the same incarnation
        (same identifier and created_at) as the one given.

        Returns:
            bool: True if a record was removed, False otherwise.
        """
        pass

    @abstractmethod
    def expired(self, now: datetime, **kwargs) -> list[MappingModel]:
        """Return all records with expires_at at or before now."""
        pass

    @abstractmethod
    def active(self, now: datetime, **kwargs) -> list[MappingModel]:
        """Return all records with expires_at strictly after now."""
        pass

    @abstractmethod
    def delete_expired(self, now: datetime, **kwargs) -> int:
        """Delete all records with expires_at at or before now.

        Each row is removed atomically; rows removed concurrently by another
        caller are not counted.

        Returns:
            int: Number of records removed by this call.
        """
        pass
