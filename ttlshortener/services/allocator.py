"""Identifier allocation

IdentifierAllocator pairs an IdentifierGenerator with the store's existence
check: it keeps drawing candidates until one is not held by any stored record
(expired or not), and gives up with ResourceExhaustedError after a fixed number
of draws instead of looping forever on a saturated key space.

The existence check is only a pre-check. The store's insert() is what enforces
uniqueness; ShorteningService pulls the next candidate from the same bounded
stream when insert() loses a race, so pre-check collisions and lost races
share one budget of `max_attempts` draws.
"""

import logging
from collections.abc import Iterator

from ttlshortener.constants import Defaults
from ttlshortener.dao.base import MappingBaseDAO
from ttlshortener.exceptions import ResourceExhaustedError
from ttlshortener.utils.shortener import IdentifierGenerator


logger = logging.getLogger(__name__)


class IdentifierAllocator:
    """Allocate identifiers not yet present in a mapping store

    Attributes:
        dao (MappingBaseDAO):
            Store queried for identifier existence.
        generator (IdentifierGenerator):
            Source of candidate identifiers.
        max_attempts (int):
            Number of candidates drawn before giving up.
    """

    def __init__(
        self,
        dao: MappingBaseDAO,
        generator: IdentifierGenerator | None = None,
        max_attempts: int = Defaults.MAX_ALLOCATION_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError(f'max_attempts must be a positive integer (given value: {max_attempts}).')

        self.dao = dao
        self.generator = generator if generator is not None else IdentifierGenerator()
        self.max_attempts = max_attempts

    def candidates(self) -> Iterator[str]:
        """Yield identifiers no stored record holds at the time of their check

        At most `max_attempts` candidates are drawn over the whole iteration,
        whether they were skipped as taken or handed out to the caller.

        Raises:
            ResourceExhaustedError: Once all `max_attempts` draws are used up.
            DataStoreError: If the store can't be queried.
        """
        for attempt in range(1, self.max_attempts + 1):
            identifier = self.generator.generate()
            if self.dao.exists(identifier):
                continue
            if attempt > 1:
                logger.debug('Allocated identifier after %s attempts.', attempt, extra={'identifier': identifier})
            yield identifier

        logger.error('Identifier space exhausted.', extra={'attempts': self.max_attempts})
        raise ResourceExhaustedError(f'Unable to allocate a free identifier after {self.max_attempts} attempts.')

    def allocate(self) -> str:
        """Return an identifier no stored record holds at the time of the check

        Raises:
            ResourceExhaustedError: If every one of `max_attempts` candidates collided.
            DataStoreError: If the store can't be queried.
        """
        return next(self.candidates())
