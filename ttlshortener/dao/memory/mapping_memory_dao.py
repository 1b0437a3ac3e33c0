"""In-process implementation of MappingBaseDAO

Keeps mappings in dictionaries guarded by a single lock, so every operation is
atomic with respect to the others. Intended for local runs (`"active_backend":
"memory"` in AppConfig) and for exercising the service without Redis.

Example:
    >>> from datetime import datetime, timedelta, UTC
    >>> dao = MappingMemoryDAO()
    >>> dao.insert(MappingModel('aB3xY9', 'https://example.com', datetime.now(UTC) + timedelta(days=1)))
    MappingModel(identifier='aB3xY9', target='https://example.com', ...)
    >>> dao.exists('aB3xY9')
    True
"""

import threading
from datetime import datetime, UTC

from beartype import beartype

from ttlshortener.models import MappingModel
from ttlshortener.dao.base import MappingBaseDAO
from ttlshortener.dao.exceptions import MappingAlreadyExistsError
from ttlshortener.utils.expiry import ensure_utc, is_expired


class MappingMemoryDAO(MappingBaseDAO):
    """Thread-safe in-memory mapping store.

    Attributes:
        mappings (dict[str, MappingModel]):
            Records keyed by identifier.
        targets (dict[str, set[str]]):
            Secondary index: target URL -> identifiers.
    """

    def __init__(self):
        self.mappings: dict[str, MappingModel] = {}
        self.targets: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    @beartype
    def insert(self, mapping: MappingModel, **kwargs) -> MappingModel:
        with self._lock:
            if mapping.identifier in self.mappings:
                raise MappingAlreadyExistsError(f"Mapping with identifier '{mapping.identifier}' already exists.")
            stored = mapping.stamped(datetime.now(UTC))
            self.mappings[stored.identifier] = stored
            self.targets.setdefault(stored.target, set()).add(stored.identifier)
            return stored

    @beartype
    def get(self, identifier: str, **kwargs) -> MappingModel | None:
        with self._lock:
            return self.mappings.get(identifier)

    @beartype
    def exists(self, identifier: str, **kwargs) -> bool:
        with self._lock:
            return identifier in self.mappings

    @beartype
    def find_by_target(self, target: str, now: datetime | None = None, **kwargs) -> MappingModel | None:
        with self._lock:
            candidates = [self.mappings[identifier] for identifier in sorted(self.targets.get(target, ()))]
        if now is not None:
            candidates = [mapping for mapping in candidates if not is_expired(mapping, now)]
        return max(candidates, key=lambda mapping: ensure_utc(mapping.expires_at), default=None)

    @beartype
    def delete(self, mapping: MappingModel, **kwargs) -> bool:
        with self._lock:
            stored = self.mappings.get(mapping.identifier)
            if stored is None:
                return False
            if mapping.created_at is not None and stored.created_at != mapping.created_at:
                return False
            self._remove_unlocked(stored)
            return True

    @beartype
    def expired(self, now: datetime, **kwargs) -> list[MappingModel]:
        with self._lock:
            return [mapping for mapping in self.mappings.values() if is_expired(mapping, now)]

    @beartype
    def active(self, now: datetime, **kwargs) -> list[MappingModel]:
        with self._lock:
            return [mapping for mapping in self.mappings.values() if not is_expired(mapping, now)]

    @beartype
    def delete_expired(self, now: datetime, **kwargs) -> int:
        with self._lock:
            expired = [mapping for mapping in self.mappings.values() if is_expired(mapping, now)]
            for mapping in expired:
                self._remove_unlocked(mapping)
            return len(expired)

    def _remove_unlocked(self, mapping: MappingModel) -> None:
        """Drop a record and its index entry. Caller must hold self._lock."""
        del self.mappings[mapping.identifier]
        identifiers = self.targets.get(mapping.target)
        if identifiers is not None:
            identifiers.discard(mapping.identifier)
            if not identifiers:
                del self.targets[mapping.target]
