"""Data Access Object (DAO) implementation for managing short links in Redis

This module provides a Redis-based implementation of ShortLinkBaseDAO.

Responsibilities:
    - Insert and retrieve `code -> target` mappings;
    - Maintain the `url hash -> code` deduplication index;
    - Provide defensive error handling and raise appropriate DAO exceptions.

Classes:
    ShortLinkRedisDAO:
        DAO for storing and retrieving ShortLinkModel in a Redis datastore.

Example:
    >>> from gitmirror.models import ShortLinkModel
    >>> from gitmirror.dao.redis import ShortLinkRedisDAO

    >>> dao = ShortLinkRedisDAO(prefix="gitmirror:dev")

    >>> link = ShortLinkModel(code="Kx7pQa", target="https://github.com/a/b")
    >>> await dao.insert(link)
    <ShortLinkRedisDAO>
    >>> (await dao.get("Kx7pQa")).target
    'https://github.com/a/b'
"""

from beartype import beartype

from gitmirror.models import ShortLinkModel
from gitmirror.dao.base import ShortLinkBaseDAO
from gitmirror.dao.redis.mixins import RedisClientMixin
from gitmirror.dao.redis.helpers import handle_redis_connection_error
from gitmirror.dao.exceptions import ShortLinkAlreadyExistsError, ShortLinkNotFoundError


class ShortLinkRedisDAO(RedisClientMixin, ShortLinkBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short link mappings

    Keys (see RedisKeySchema):
        [<prefix>:]c:<code>      -> target URL (string, no TTL)
        [<prefix>:]u:<url hash>  -> code (string, no TTL)

    Both keys are written with SET NX so concurrent writers never overwrite
    each other, except for an explicitly forced insert.

    Attributes (see RedisClientMixin):
        redis (redis.asyncio.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    @handle_redis_connection_error
    @beartype
    async def insert(self, short_link: ShortLinkModel, force: bool = False, **kwargs) -> 'ShortLinkRedisDAO':
        """Store a `code -> target` mapping

        Args:
            short_link (ShortLinkModel):
                Mapping to store.
            force (bool):
                If True, overwrite whatever is stored under the code.

        Returns:
            ShortLinkRedisDAO: self (for method chaining)

        Raises:
            ShortLinkAlreadyExistsError:
                If the code is already taken and force is False.
            DataStoreError:
                If a Redis connection issue occurs.

        Example:
            >>> await dao.insert(ShortLinkModel(code='Kx7pQa', target='https://github.com/a/b'))
            <ShortLinkRedisDAO>
        """
        key = self.keys.link_target_key(short_link.code)
        stored = await self.redis.set(key, short_link.target, nx=not force)
        if not stored:
            raise ShortLinkAlreadyExistsError(f"Short link with code '{short_link.code}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    async def get(self, code: str, **kwargs) -> ShortLinkModel:
        """Retrieve a stored short link by code

        Raises:
            ShortLinkNotFoundError:
                If the code does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> await dao.get('Kx7pQa')
            ShortLinkModel(code='Kx7pQa', target='https://github.com/a/b')
        """
        target = await self.redis.get(self.keys.link_target_key(code))
        if target is None:
            raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")
        return ShortLinkModel(code=code, target=target)

    @handle_redis_connection_error
    @beartype
    async def find(self, url_hash: str, **kwargs) -> str | None:
        """Return the code already issued for a URL hash, None if there is none"""
        return await self.redis.get(self.keys.link_code_key(url_hash))

    @handle_redis_connection_error
    @beartype
    async def index(self, url_hash: str, code: str, **kwargs) -> str:
        """Record `url hash -> code` unless another code got there first

        NOTE: Two concurrent create requests for the same URL can both miss
              find() and both insert a code:

              (request 1): find(<hash>) => None
              (request 2): find(<hash>) => None
              (request 1): SET c:<code 1> <url> NX; SET u:<hash> <code 1> NX => OK
              (request 2): SET c:<code 2> <url> NX; SET u:<hash> <code 2> NX => nil
                           GET u:<hash> => <code 1>

              Request 2 hands out <code 1> as well. <code 2> stays in the store
              and still resolves to the same URL, but is never handed out.

        Returns:
            str: the code recorded for the hash after this call.
        """
        key = self.keys.link_code_key(url_hash)
        if await self.redis.set(key, code, nx=True):
            return code

        existing = await self.redis.get(key)
        return existing if existing is not None else code
