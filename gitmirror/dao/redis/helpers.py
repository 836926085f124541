import functools
from typing import Any, TypeVar
from collections.abc import Callable, Awaitable

import redis
import redis.asyncio

from gitmirror.dao.exceptions import DataStoreError


__all__ = ['describe_connection', 'handle_redis_connection_error']

F = TypeVar('F', bound=Callable[..., Awaitable[Any]])


def describe_connection(client: redis.asyncio.Redis) -> str:
    """Return '<host>:<port>/<db>' of a Redis client, for error messages"""
    info = client.connection_pool.connection_kwargs
    return f"{info.get('host')}:{info.get('port')}/{info.get('db')}"


def handle_redis_connection_error(method: F) -> F:
    """Wrap Redis-interacting async DAO methods to translate Redis failures

    Connection errors, socket timeouts and command errors all surface as
    DataStoreError, so callers handle a single store failure type.

    Args:
        method (Callable[..., Awaitable[Any]]):
            DAO coroutine performing Redis operations which may raise redis.exceptions.RedisError.

    Returns:
        Callable[..., Awaitable[Any]]:
            Wrapped coroutine which raises DataStoreError when Redis fails.

    Example:
        >>> @handle_redis_connection_error
        ... async def find(self, url_hash):
        ...     return await self.redis.get(url_hash)
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except redis.exceptions.ConnectionError as e:
            raise DataStoreError(f"Can't connect to Redis at {describe_connection(self.redis)}.") from e
        except redis.exceptions.RedisError as e:
            raise DataStoreError(f'Redis at {describe_connection(self.redis)} failed: {e}') from e

    return wrapper
