"""Unit tests for the ShortLinkRedisDAO

Test coverage includes:

1. Insertion behavior
   - Validates inserting a short link uses SET NX on `c:<code>`.
   - Confirms taken codes raise ShortLinkAlreadyExistsError.
   - Confirms forced inserts overwrite without NX.
   - Ensures invalid types raise BeartypeCallHintParamViolation.

2. Retrieval behavior
   - Ensures fetching valid codes returns a populated ShortLinkModel.
   - Confirms missing keys raise ShortLinkNotFoundError.

3. Deduplication index
   - Ensures find() reads `u:<hash>`.
   - Ensures index() records the code with SET NX, or returns the code recorded first.

4. Connectivity
   - Confirms Redis connection errors raise DataStoreError.
"""

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from gitmirror.models import ShortLinkModel
from gitmirror.dao.exceptions import DataStoreError, ShortLinkAlreadyExistsError, ShortLinkNotFoundError
from gitmirror.dao.redis import ShortLinkRedisDAO


TARGET = 'https://github.com/a/b/archive/refs/heads/main.zip'
DIGEST = 'a9993e364706816aba3e25717850c26c9cd0d89d'


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def dao(redis_client, app_prefix):
    """Create a ShortLinkRedisDAO instance with a mocked client."""
    return ShortLinkRedisDAO(redis_client=redis_client, prefix=app_prefix)


# -------------------------------
# 1. Insertion behavior
# -------------------------------


@pytest.mark.asyncio
async def test_insert_short_link(dao, redis_client):
    """Ensure insert() writes the target put-if-absent and returns the DAO."""
    result = await dao.insert(ShortLinkModel(code='Kx7pQa', target=TARGET))

    assert result is dao
    redis_client.set.assert_awaited_once_with('testapp:test:c:Kx7pQa', TARGET, nx=True)


@pytest.mark.asyncio
async def test_insert_taken_code(dao, redis_client):
    redis_client.set.return_value = None

    with pytest.raises(ShortLinkAlreadyExistsError, match="'Kx7pQa' already exists"):
        await dao.insert(ShortLinkModel(code='Kx7pQa', target=TARGET))


@pytest.mark.asyncio
async def test_insert_forced(dao, redis_client):
    await dao.insert(ShortLinkModel(code='Kx7pQa', target=TARGET), force=True)
    redis_client.set.assert_awaited_once_with('testapp:test:c:Kx7pQa', TARGET, nx=False)


@pytest.mark.asyncio
@pytest.mark.parametrize('short_link', [None, 'Kx7pQa', {'code': 'Kx7pQa', 'target': TARGET}])
async def test_insert_invalid_type(dao, short_link):
    with pytest.raises(BeartypeCallHintParamViolation):
        await dao.insert(short_link)


# -------------------------------
# 2. Retrieval behavior
# -------------------------------


@pytest.mark.asyncio
async def test_get_short_link(dao, redis_client):
    redis_client.get.return_value = TARGET

    link = await dao.get('Kx7pQa')

    assert link == ShortLinkModel(code='Kx7pQa', target=TARGET)
    redis_client.get.assert_awaited_once_with('testapp:test:c:Kx7pQa')


@pytest.mark.asyncio
async def test_get_missing_short_link(dao):
    with pytest.raises(ShortLinkNotFoundError):
        await dao.get('nope42')


@pytest.mark.asyncio
async def test_get_invalid_type(dao):
    with pytest.raises(BeartypeCallHintParamViolation):
        await dao.get(123)


# -------------------------------
# 3. Deduplication index
# -------------------------------


@pytest.mark.asyncio
async def test_find(dao, redis_client):
    assert await dao.find(DIGEST) is None

    redis_client.get.return_value = 'Kx7pQa'
    assert await dao.find(DIGEST) == 'Kx7pQa'
    redis_client.get.assert_awaited_with(f'testapp:test:u:{DIGEST}')


@pytest.mark.asyncio
async def test_index_records_code(dao, redis_client):
    assert await dao.index(DIGEST, 'Kx7pQa') == 'Kx7pQa'
    redis_client.set.assert_awaited_once_with(f'testapp:test:u:{DIGEST}', 'Kx7pQa', nx=True)
    redis_client.get.assert_not_awaited()


@pytest.mark.asyncio
async def test_index_returns_existing_code(dao, redis_client):
    """Ensure a writer that loses the race gets the winner's code back."""
    redis_client.set.return_value = None
    redis_client.get.return_value = 'Winner'

    assert await dao.index(DIGEST, 'Loser1') == 'Winner'


# -------------------------------
# 4. Connectivity
# -------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize(
    'method, args',
    [
        ('insert', (ShortLinkModel(code='Kx7pQa', target=TARGET),)),
        ('get', ('Kx7pQa',)),
        ('find', (DIGEST,)),
        ('index', (DIGEST, 'Kx7pQa')),
    ],
)
async def test_connection_error(dao, redis_client, method, args):
    redis_client.set.side_effect = redis.exceptions.ConnectionError('refused')
    redis_client.get.side_effect = redis.exceptions.ConnectionError('refused')

    with pytest.raises(DataStoreError, match="Can't connect to Redis at redis.test:6379/0."):
        await getattr(dao, method)(*args)
