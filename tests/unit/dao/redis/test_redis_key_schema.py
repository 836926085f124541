"""Unit tests for the RedisKeySchema class in redis_key_schema.py.

Test coverage includes:

1. Link target key generation
   - Ensures link_target_key() generates `c:<code>` keys.

2. Link code key generation
   - Ensures link_code_key() generates `u:<url hash>` keys.

3. Prefix behavior
   - Confirms keys are not prefixed when no prefix is provided.
   - Confirms keys are correctly prefixed when a valid prefix is provided.
   - Ensures improper prefix types raise TypeError.
"""

import pytest

from gitmirror.dao.redis.redis_key_schema import RedisKeySchema


# -------------------------------
# 1. Link target key generation
# -------------------------------


@pytest.mark.parametrize(
    'code, expected',
    [
        ('Kx7pQa', 'c:Kx7pQa'),
        ('abc123', 'c:abc123'),
    ],
)
def test_link_target_key(code, expected):
    assert RedisKeySchema().link_target_key(code) == expected


# -------------------------------
# 2. Link code key generation
# -------------------------------


def test_link_code_key():
    digest = 'a9993e364706816aba3e25717850c26c9cd0d89d'
    assert RedisKeySchema().link_code_key(digest) == f'u:{digest}'


# -------------------------------
# 3. Prefix behavior
# -------------------------------


@pytest.mark.parametrize('prefix', ['gitmirror:prod', 'gitmirror:dev', 'x'])
def test_custom_prefix(prefix):
    keys = RedisKeySchema(prefix=prefix)
    assert keys.link_target_key('abc123') == f'{prefix}:c:abc123'
    assert keys.link_code_key('ffff') == f'{prefix}:u:ffff'


@pytest.mark.parametrize('prefix', [123, 4.5, ['list'], {'a': 1}])
def test_invalid_prefix_type(prefix):
    with pytest.raises(TypeError):
        RedisKeySchema(prefix=prefix)
