"""Unit tests for ShorteningService

Test coverage includes:

1. Creation
   - Created links resolve to their target and carry the requested (or default) TTL.
   - Identifiers are 6 Base62 characters.
   - Invalid targets and TTLs raise InvalidInputError and persist nothing.

2. Deduplication
   - A live link to the same target is reused, without refreshing its TTL.
   - An expired link to the same target is never reused.

3. Identifier collisions
   - Taken identifiers are skipped; exhaustion raises ResourceExhaustedError.
   - Taken identifiers and lost races share one budget of max_attempts draws.
   - A lost insert race re-allocates instead of failing or overwriting.

4. Resolution
   - Unknown and expired identifiers raise NotFoundError.
   - Expired links are reclaimed on read.

5. Cleanup and listing
   - cleanup() removes exactly the expired links and is idempotent.
   - list_active() returns live links, soonest expiry first.

6. Concurrency
   - Concurrent creates of distinct targets get distinct identifiers.
"""

import random
import string
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest
from beartype.roar import BeartypeCallHintParamViolation
from freezegun import freeze_time

from ttlshortener.models import MappingModel
from ttlshortener.dao import MappingMemoryDAO
from ttlshortener.dao.base import MappingBaseDAO
from ttlshortener.dao.exceptions import MappingAlreadyExistsError
from ttlshortener.exceptions import InvalidInputError, NotFoundError, ResourceExhaustedError
from ttlshortener.services import ShorteningService
from ttlshortener.utils.shortener import IdentifierGenerator


NOW = datetime(2025, 10, 15, tzinfo=UTC)
TARGET = 'https://example.com/blog/article-123'


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def dao():
    return MappingMemoryDAO()


@pytest.fixture
def service(dao):
    return ShorteningService(dao, generator=IdentifierGenerator(rng=random.Random(2025)))


def scripted_generator(*identifiers):
    generator = MagicMock(spec=IdentifierGenerator)
    generator.generate.side_effect = list(identifiers)
    return generator


# -------------------------------
# 1. Creation
# -------------------------------


@freeze_time('2025-10-15')
def test_create_and_resolve(service, dao):
    identifier = service.create(TARGET, ttl_days=7)

    assert service.resolve(identifier) == TARGET
    stored = dao.get(identifier)
    assert stored.expires_at == NOW + timedelta(days=7)
    assert stored.created_at == NOW


@freeze_time('2025-10-15')
def test_create_uses_default_ttl(dao):
    service = ShorteningService(dao, default_ttl_days=30)

    identifier = service.create(TARGET)

    assert service.info(identifier).expires_at == NOW + timedelta(days=30)


def test_identifier_format(service):
    alphabet = set(string.ascii_letters + string.digits)
    identifiers = [service.create(f'https://example.com/{index}') for index in range(200)]

    assert all(len(identifier) == 6 and set(identifier) <= alphabet for identifier in identifiers)
    assert len(set(identifiers)) == 200


@pytest.mark.parametrize('target', ['not a url', 'ftp://example.com', '/relative', 'https://'])
def test_create_with_invalid_target(service, dao, target):
    with pytest.raises(InvalidInputError):
        service.create(target)

    assert dao.mappings == {}


def test_create_with_negative_ttl(service, dao):
    with pytest.raises(InvalidInputError, match='must not be negative'):
        service.create(TARGET, ttl_days=-1)

    assert dao.mappings == {}


@pytest.mark.parametrize('target, ttl_days', [(123, None), (TARGET, '7')])
def test_create_with_invalid_types(service, target, ttl_days):
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        service.create(target, ttl_days=ttl_days)


@freeze_time('2025-10-15')
def test_create_with_zero_ttl(service, dao):
    """Ensure ttl_days=0 stores a link which is expired from the start."""
    identifier = service.create(TARGET, ttl_days=0)

    assert dao.get(identifier).expires_at == NOW
    with pytest.raises(NotFoundError):
        service.resolve(identifier)


def test_invalid_default_ttl(dao):
    with pytest.raises(InvalidInputError):
        ShorteningService(dao, default_ttl_days=-1)


# -------------------------------
# 2. Deduplication
# -------------------------------


def test_create_reuses_live_link(service, dao):
    with freeze_time('2025-10-15') as frozen:
        first = service.create(TARGET, ttl_days=7)
        frozen.move_to('2025-10-20')
        second = service.create(TARGET, ttl_days=30)

    assert first == second
    assert len(dao.mappings) == 1
    # TTL isn't refreshed by the second request
    assert dao.get(first).expires_at == NOW + timedelta(days=7)


def test_create_after_expiry_gets_new_link(service, dao):
    with freeze_time('2025-10-15') as frozen:
        first = service.create(TARGET, ttl_days=7)
        frozen.move_to('2025-10-22')  # exactly at expiry
        second = service.create(TARGET, ttl_days=7)

        assert first != second
        assert service.resolve(second) == TARGET
        with pytest.raises(NotFoundError):
            service.resolve(first)


def test_create_distinct_targets(service):
    assert service.create('https://example.com/a') != service.create('https://example.com/b')


# -------------------------------
# 3. Identifier collisions
# -------------------------------


def test_create_skips_taken_identifier(dao):
    dao.insert(MappingModel(identifier='aaaaaa', target='https://example.com/old', expires_at=NOW - timedelta(days=1)))
    service = ShorteningService(dao, generator=scripted_generator('aaaaaa', 'aaaaaa', 'bbbbbb'))

    assert service.create(TARGET) == 'bbbbbb'
    # An expired, unswept record still holds its identifier
    assert dao.get('aaaaaa').target == 'https://example.com/old'


def test_create_exhausted(dao):
    dao.insert(MappingModel(identifier='aaaaaa', target='https://example.com/old', expires_at=NOW + timedelta(days=1)))
    service = ShorteningService(dao, generator=scripted_generator(*['aaaaaa'] * 5), max_attempts=5)

    with pytest.raises(ResourceExhaustedError):
        service.create(TARGET)

    assert list(dao.mappings) == ['aaaaaa']


def test_create_retries_after_lost_insert_race():
    """Ensure an insert losing the identifier to a concurrent writer re-allocates."""
    dao = MagicMock(spec=MappingBaseDAO)
    dao.find_by_target.return_value = None
    dao.exists.return_value = False
    dao.insert.side_effect = [
        MappingAlreadyExistsError("Mapping with identifier 'aaaaaa' already exists."),
        MappingModel(identifier='bbbbbb', target=TARGET, expires_at=NOW + timedelta(days=30), created_at=NOW),
    ]
    service = ShorteningService(dao, generator=scripted_generator('aaaaaa', 'bbbbbb'))

    assert service.create(TARGET) == 'bbbbbb'
    assert dao.insert.call_count == 2
    assert [c.args[0].identifier for c in dao.insert.call_args_list] == ['aaaaaa', 'bbbbbb']


def test_create_gives_up_after_repeated_lost_races():
    dao = MagicMock(spec=MappingBaseDAO)
    dao.find_by_target.return_value = None
    dao.exists.return_value = False
    dao.insert.side_effect = MappingAlreadyExistsError('taken')
    service = ShorteningService(dao, generator=scripted_generator(*'abc'), max_attempts=3)

    with pytest.raises(ResourceExhaustedError):
        service.create(TARGET)
    assert dao.insert.call_count == 3


def test_create_shares_attempt_budget_between_collisions_and_lost_races():
    """Ensure taken identifiers and lost insert races together draw at most max_attempts candidates."""
    dao = MagicMock(spec=MappingBaseDAO)
    dao.find_by_target.return_value = None
    dao.exists.side_effect = [True] * 9 + [False] * 100
    dao.insert.side_effect = MappingAlreadyExistsError('taken')
    generator = MagicMock(spec=IdentifierGenerator)
    generator.generate.return_value = 'aaaaaa'
    service = ShorteningService(dao, generator=generator, max_attempts=10)

    with pytest.raises(ResourceExhaustedError, match='after 10 attempts'):
        service.create(TARGET)

    assert generator.generate.call_count <= 10
    assert dao.exists.call_count == 10
    assert dao.insert.call_count == 1


# -------------------------------
# 4. Resolution
# -------------------------------


def test_resolve_unknown_identifier(service):
    with pytest.raises(NotFoundError, match="Link 'zzzzzz' doesn't exist."):
        service.resolve('zzzzzz')


def test_resolve_reclaims_expired_link(service, dao):
    with freeze_time('2025-10-15') as frozen:
        identifier = service.create(TARGET, ttl_days=1)
        frozen.move_to('2025-10-16')

        with pytest.raises(NotFoundError):
            service.resolve(identifier)

        assert dao.get(identifier) is None
        assert service.list_active() == []
        assert dao.find_by_target(TARGET) is None


def test_resolve_just_before_expiry(service):
    with freeze_time('2025-10-15') as frozen:
        identifier = service.create(TARGET, ttl_days=1)
        frozen.move_to('2025-10-15 23:59:59')

        assert service.resolve(identifier) == TARGET


def test_info_returns_expired_record_without_side_effects(service, dao):
    with freeze_time('2025-10-15') as frozen:
        identifier = service.create(TARGET, ttl_days=1)
        frozen.move_to('2025-11-01')

        assert service.info(identifier).target == TARGET
        assert dao.exists(identifier)

    with pytest.raises(NotFoundError):
        service.info('zzzzzz')


# -------------------------------
# 5. Cleanup and listing
# -------------------------------


def test_cleanup_removes_only_expired_links(service, dao):
    with freeze_time('2025-10-15') as frozen:
        short_lived = service.create('https://example.com/a', ttl_days=1)
        boundary = service.create('https://example.com/b', ttl_days=2)
        long_lived = service.create('https://example.com/c', ttl_days=30)
        frozen.move_to('2025-10-17')

        assert service.cleanup() == 2
        assert service.cleanup() == 0

        assert not dao.exists(short_lived)
        assert not dao.exists(boundary)
        assert service.resolve(long_lived) == 'https://example.com/c'
        assert all(mapping.expires_at > datetime.now(UTC) for mapping in service.list_active())


def test_cleanup_at_explicit_moment(service, dao):
    with freeze_time('2025-10-15'):
        service.create('https://example.com/a', ttl_days=1)
        service.create('https://example.com/b', ttl_days=10)

    assert service.cleanup(now=NOW + timedelta(days=5)) == 1
    assert service.cleanup(now=datetime(2025, 10, 30)) == 1  # naive is read as UTC
    assert dao.mappings == {}


def test_cleanup_on_empty_store(service):
    assert service.cleanup() == 0


def test_list_active(service):
    with freeze_time('2025-10-15') as frozen:
        later = service.create('https://example.com/later', ttl_days=20)
        sooner = service.create('https://example.com/sooner', ttl_days=5)
        service.create('https://example.com/expired', ttl_days=1)
        frozen.move_to('2025-10-16')

        assert [mapping.identifier for mapping in service.list_active()] == [sooner, later]


# -------------------------------
# 6. Concurrency
# -------------------------------


def test_concurrent_creates_get_distinct_identifiers(dao):
    service = ShorteningService(dao)
    targets = [f'https://example.com/{index}' for index in range(200)]

    with ThreadPoolExecutor(max_workers=8) as executor:
        identifiers = list(executor.map(service.create, targets))

    assert len(set(identifiers)) == len(targets)
    assert {dao.get(identifier).target for identifier in identifiers} == set(targets)
