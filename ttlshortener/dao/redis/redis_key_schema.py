import functools
from collections.abc import Callable

import xxhash


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing mappings.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "ttlshortener:prod" or "ttlshortener:dev".

    Keys:
        links:<identifier>        -> JSON encoded MappingModel
        links:expiry              -> sorted set of identifiers scored by expiry epoch
        targets:<xxh64(target)>   -> set of identifiers mapped to a target URL
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, identifier: str) -> str:
        return f'links:{identifier}'

    @prefix_key
    def expiry_index_key(self) -> str:
        return 'links:expiry'

    @prefix_key
    def target_index_key(self, target: str) -> str:
        # Target URLs may be up to 2048 chars, so the key holds a fixed-width digest
        digest = xxhash.xxh64_hexdigest(target.encode('utf-8'))
        return f'targets:{digest}'
