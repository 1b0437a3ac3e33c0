import json
from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
import redis

from ttlshortener.models import MappingModel
from ttlshortener.dao.redis import RedisKeySchema, MappingRedisDAO


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a Redis pipeline-compatible client."""
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.exists.return_value = 0
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None
    client.get.return_value = None
    return client


@pytest.fixture
def key_schema() -> RedisKeySchema:
    """Mock RedisKeySchema to return predictable key values."""
    mock = MagicMock(spec=RedisKeySchema)
    mock.link_key.side_effect = lambda identifier: f'testapp:test:links:{identifier}'
    mock.expiry_index_key.return_value = 'testapp:test:links:expiry'
    mock.target_index_key.side_effect = lambda target: f'testapp:test:targets:{len(target)}'
    return mock


@pytest.fixture
def dao(redis_client, key_schema, app_prefix) -> MappingRedisDAO:
    """Create a MappingRedisDAO instance with mocked dependencies."""
    _dao = MappingRedisDAO(redis_client=redis_client, prefix=app_prefix)
    _dao.keys = key_schema
    return _dao


@pytest.fixture
def make_mapping():
    """Factory for stored mappings (created_at set, as returned by insert)."""

    def _make_mapping(identifier='aB3xY9', target='https://example.com/page', expires_at='2025-11-14', created_at='2025-10-15'):
        return MappingModel(
            identifier=identifier,
            target=target,
            expires_at=datetime.fromisoformat(expires_at).replace(tzinfo=UTC),
            created_at=datetime.fromisoformat(created_at).replace(tzinfo=UTC),
            updated_at=datetime.fromisoformat(created_at).replace(tzinfo=UTC),
        )

    return _make_mapping
