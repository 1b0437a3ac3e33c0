from ttlshortener.dao.base import MappingBaseDAO
from ttlshortener.dao.memory import MappingMemoryDAO
from ttlshortener.dao.redis import MappingRedisDAO


__all__ = [
    'MappingBaseDAO',
    'MappingMemoryDAO',
    'MappingRedisDAO',
]
