"""Redis client plumbing shared by the Redis-backed DAOs

RedisClientMixin owns one `redis.asyncio.Redis` client per DAO together with
the key schema for the DAO's namespace. Creating the mixin never touches the
network; `healthcheck()` is called once at start-up (see gitmirror.app).

Example:
    >>> class ShortLinkRedisDAO(RedisClientMixin, ShortLinkBaseDAO):
    ...     pass
    ...
    >>> dao = ShortLinkRedisDAO(redis_host='redis.internal', prefix='gitmirror:prod')
    >>> await dao.healthcheck()
    True
    >>> await dao.aclose()
"""

import redis
import redis.asyncio

from gitmirror.dao.redis.redis_key_schema import RedisKeySchema
from gitmirror.dao.redis.helpers import describe_connection
from gitmirror.dao.exceptions import DataStoreError
from gitmirror.utils.constants import REDIS_SOCKET_TIMEOUT_SECONDS


class RedisClientMixin:
    """Redis client setup, health check and shutdown for Redis-backed DAOs

    Attributes:
        redis (redis.asyncio.Redis):
            Client used by the DAO methods.
        keys (RedisKeySchema):
            Namespaced key names. Subclasses may replace it with a richer schema.
    """

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int | str = 6379,
        redis_db: int | str = 0,
        redis_decode_responses: bool = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_socket_timeout: float | None = REDIS_SOCKET_TIMEOUT_SECONDS,
        redis_client: redis.asyncio.Redis | None = None,
        prefix: str | None = None,
    ):
        """Use `redis_client` when given, otherwise connect with the redis_* parameters

        Args:
            redis_decode_responses (bool):
                Return str instead of bytes. DAOs storing binary data pass False.
            prefix (str | None):
                Namespace prefix for all keys, e.g. 'gitmirror:prod'.
            redis_socket_timeout (float | None):
                Connect and read timeout in seconds. None waits forever.
        """
        self.redis = redis_client if redis_client is not None else redis.asyncio.Redis(
            host=redis_host,
            port=int(redis_port),
            db=int(redis_db),
            decode_responses=redis_decode_responses,
            username=redis_username,
            password=redis_password,
            socket_timeout=redis_socket_timeout,
            socket_connect_timeout=redis_socket_timeout,
        )
        self.keys = RedisKeySchema(prefix=prefix)

    async def healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis

        Returns:
            bool: True when Redis answers. False when it doesn't and `raise_error` is False.

        Raises:
            DataStoreError:
                If Redis doesn't answer and `raise_error` is True.
        """
        try:
            await self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if not raise_error:
                return False
            raise DataStoreError(
                f"Can't connect to Redis at {describe_connection(self.redis)}. Check the provided configuration parameters."
            ) from e
        return True

    async def aclose(self) -> None:
        await self.redis.aclose()
