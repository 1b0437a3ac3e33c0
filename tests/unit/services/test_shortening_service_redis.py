"""Unit tests for ShorteningService over MappingRedisDAO

The DAO talks to an in-process Redis (fakeredis), so commands, options and
transactions run with real Redis semantics instead of mocked return values.

Test coverage includes:

1. Link lifecycle
   - create/resolve, reuse of a live link, zero TTL, list_active and cleanup.
   - Targets with non-ASCII characters.

2. Target index upkeep
   - Index members whose record was dropped by the retention backstop are pruned on read.
   - Target sets expire with their longest-retained member.
"""

import random
from datetime import datetime, timedelta, UTC

import fakeredis
import pytest

from ttlshortener.constants import TTL
from ttlshortener.models import MappingModel
from ttlshortener.dao.redis import MappingRedisDAO
from ttlshortener.exceptions import NotFoundError
from ttlshortener.services import ShorteningService
from ttlshortener.utils.shortener import IdentifierGenerator


TARGET = 'https://example.com/blog/article-123'


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def dao(redis_client):
    return MappingRedisDAO(redis_client=redis_client, prefix='ttlshortener:test')


@pytest.fixture
def service(dao):
    return ShorteningService(dao, generator=IdentifierGenerator(rng=random.Random(2025)))


# -------------------------------
# 1. Link lifecycle
# -------------------------------


def test_create_and_resolve(service, dao):
    identifier = service.create(TARGET, ttl_days=3)

    assert service.resolve(identifier) == TARGET
    assert dao.find_by_target(TARGET).identifier == identifier


def test_create_reuses_live_link(service, dao, redis_client):
    first = service.create(TARGET, ttl_days=3)

    assert service.create(TARGET, ttl_days=30) == first
    assert redis_client.zcard(dao.keys.expiry_index_key()) == 1


def test_create_with_non_ascii_target(service):
    target = 'https://example.com/straße?q=ñ'
    identifier = service.create(target)

    assert service.resolve(identifier) == target
    assert service.create(target) == identifier


def test_create_with_zero_ttl(service, dao):
    identifier = service.create(TARGET, ttl_days=0)

    with pytest.raises(NotFoundError):
        service.resolve(identifier)
    assert dao.get(identifier) is None
    assert service.create(TARGET, ttl_days=1) != identifier


def test_list_active_and_cleanup(service, dao):
    soon = service.create('https://example.com/soon', ttl_days=1)
    later = service.create('https://example.com/later', ttl_days=5)
    expired = service.create('https://example.com/expired', ttl_days=0)

    assert [mapping.identifier for mapping in service.list_active()] == [soon, later]
    assert service.cleanup() == 1
    assert dao.get(expired) is None

    assert service.cleanup(datetime.now(UTC) + timedelta(days=2)) == 1
    assert dao.get(soon) is None
    assert [mapping.identifier for mapping in service.list_active()] == [later]
    assert service.cleanup(datetime.now(UTC) + timedelta(days=2)) == 0


# -------------------------------
# 2. Target index upkeep
# -------------------------------


def test_find_by_target_prunes_records_dropped_by_retention(service, dao, redis_client):
    identifier = service.create(TARGET, ttl_days=3)
    # Retention backstop (EXAT) fired without a sweep
    redis_client.delete(dao.keys.link_key(identifier))

    assert dao.find_by_target(TARGET) is None
    assert not redis_client.exists(dao.keys.target_index_key(TARGET))

    assert service.cleanup(datetime.now(UTC) + timedelta(days=30)) == 0
    assert redis_client.zcard(dao.keys.expiry_index_key()) == 0


@pytest.mark.parametrize('first_days, second_days', [(10, 2), (2, 10)])
def test_target_index_expires_with_longest_retained_member(dao, redis_client, first_days, second_days):
    now = datetime.now(UTC)
    dao.insert(MappingModel(identifier='aB3xY9', target=TARGET, expires_at=now + timedelta(days=first_days)))
    dao.insert(MappingModel(identifier='cD4eF5', target=TARGET, expires_at=now + timedelta(days=second_days)))

    ttl = redis_client.ttl(dao.keys.target_index_key(TARGET))

    longest = timedelta(days=10, seconds=TTL.RETENTION_GRACE).total_seconds()
    assert longest - 60 < ttl <= longest
    assert redis_client.smembers(dao.keys.target_index_key(TARGET)) == {'aB3xY9', 'cD4eF5'}
