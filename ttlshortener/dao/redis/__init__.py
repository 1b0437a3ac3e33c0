from ttlshortener.dao.redis.redis_key_schema import RedisKeySchema
from ttlshortener.dao.redis.mixins import RedisClientMixin
from ttlshortener.dao.redis.mapping_redis_dao import MappingRedisDAO


__all__ = [
    'RedisKeySchema',
    'MappingRedisDAO',
    'RedisClientMixin',
]
