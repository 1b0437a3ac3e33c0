"""Build DAOs and services from a loaded Lambda configuration

The configuration is the dictionary returned by `load_config()`:

    {
        "redis": {"host": "...", "port": 6379, "db": 0},   # or "memory": {}
        "shortener": {"default_ttl_days": 30, ...}
    }

Example:
    >>> config = load_config('shorten_url')
    >>> service = build_service(config)
    >>> service.create('https://example.com')
    'aB3xY9'
"""

import logging
from typing import Any

from ttlshortener.dao.base import MappingBaseDAO
from ttlshortener.dao.memory import MappingMemoryDAO
from ttlshortener.dao.redis import MappingRedisDAO
from ttlshortener.exceptions import BadConfigurationError
from ttlshortener.services.shortening_service import ShorteningService
from ttlshortener.utils.config import ShortenerSettings, app_prefix


logger = logging.getLogger(__name__)

# Process-wide store for the memory backend, so warm Lambda containers and
# local runs keep their links between invocations
_memory_dao: MappingMemoryDAO | None = None


def build_dao(config: dict[str, Any]) -> MappingBaseDAO:
    """Instantiate the DAO of the backend present in the config

    Raises:
        BadConfigurationError: If neither a 'redis' nor a 'memory' section is present.
        DataStoreError: If Redis is configured but unreachable.
    """
    global _memory_dao

    if 'redis' in config:
        logger.debug('Using Redis as the backend database for links.')
        redis_config = {f'redis_{k}': v for k, v in config['redis'].items()}
        return MappingRedisDAO(**redis_config, prefix=app_prefix())

    if 'memory' in config:
        logger.debug('Using in-process memory as the backend database for links.')
        if _memory_dao is None:
            _memory_dao = MappingMemoryDAO()
        return _memory_dao

    raise BadConfigurationError(f'No supported backend configured (given sections: {sorted(config)}).')


def build_service(config: dict[str, Any], dao: MappingBaseDAO | None = None) -> ShorteningService:
    """Create a ShorteningService wired to the configured backend and tunables"""
    settings = ShortenerSettings.from_config(config)
    return ShorteningService(
        dao if dao is not None else build_dao(config),
        default_ttl_days=settings.default_ttl_days,
        max_attempts=settings.max_allocation_attempts,
    )
