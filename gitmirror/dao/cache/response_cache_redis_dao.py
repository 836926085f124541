"""DAO for caching proxied downloads in Redis

This module provides a Redis-backed response cache for the proxy engine.

Responsibilities:
    - Store complete upstream responses without ever holding a whole body in memory
    - Replay stored bodies chunk by chunk
    - Maintain two key types per entry (both expire after the cache TTL):
        * <prefix>:responses:<METHOD>:<url sha1>:meta   -> JSON metadata (string)
        * <prefix>:responses:<METHOD>:<url sha1>:body   -> body chunks (list)

Bodies are appended to a pending key first and renamed into place together
with the metadata in one transaction, so readers never see a partial entry.

Example:
    >>> dao = ResponseCacheRedisDAO(redis_host='localhost', prefix='gitmirror:dev')
    >>> await dao.put('https://github.com/a/b.zip', 200, {'content-type': 'application/zip'}, body)
    >>> entry = await dao.match('https://github.com/a/b.zip')
    >>> entry.status
    200
    >>> async for chunk in entry.body:
    ...     ...
"""

import json
import uuid
import logging
import contextlib
from collections.abc import AsyncIterator
from datetime import datetime, UTC
from typing import Optional

import redis
from beartype import beartype

from gitmirror.models import CachedResponseModel
from gitmirror.types import ByteStream, Headers
from gitmirror.dao.base import ResponseCacheBaseDAO
from gitmirror.dao.cache.cache_key_schema import CacheKeySchema
from gitmirror.dao.redis.mixins import RedisClientMixin
from gitmirror.dao.redis.helpers import handle_redis_connection_error
from gitmirror.dao.exceptions import CacheMissError, CachePutError
from gitmirror.utils.constants import TTL, REDIS_SOCKET_TIMEOUT_SECONDS


logger = logging.getLogger(__name__)

# Chunks fetched per LRANGE while replaying a body
REPLAY_BATCH = 8


class ResponseCacheRedisDAO(RedisClientMixin, ResponseCacheBaseDAO):
    """Redis-backed DAO for cached responses

    Attributes (via mixins):
        redis (redis.asyncio.Redis):
            Redis client (always binary: decode_responses=False).
        keys (CacheKeySchema):
            Key schema helper for generating namespaced cache keys.
        ttl (int):
            Lifetime of stored entries in seconds.
    """

    def __init__(
        self,
        ttl: int = TTL.ONE_YEAR,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_socket_timeout: Optional[float] = REDIS_SOCKET_TIMEOUT_SECONDS,
        redis_client: Optional[redis.asyncio.Redis] = None,
        prefix: Optional[str] = None,
        **kwargs,
    ):
        # Bodies are raw bytes, so responses must never be decoded
        super().__init__(
            redis_host=redis_host,
            redis_port=redis_port,
            redis_db=redis_db,
            redis_decode_responses=False,
            redis_username=redis_username,
            redis_password=redis_password,
            redis_socket_timeout=redis_socket_timeout,
            redis_client=redis_client,
            prefix=prefix,
        )
        self.keys = CacheKeySchema(prefix=prefix)
        self.ttl = ttl

    @handle_redis_connection_error
    @beartype
    async def match(self, url: str, method: str = 'GET') -> CachedResponseModel:
        """Look up a stored response

        Metadata and body length are read in one round trip. An entry whose body
        list doesn't hold the recorded number of chunks (e.g. evicted under
        memory pressure) is reported as a miss.

        Raises:
            CacheMissError:
                If nothing (or only a damaged entry) is stored for the request.
            DataStoreError:
                If a Redis connectivity issue occurs (handled by decorator).
        """
        meta_key = self.keys.response_meta_key(method, url)
        body_key = self.keys.response_body_key(method, url)

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.get(meta_key)
            pipe.llen(body_key)
            raw_meta, chunks = await pipe.execute()

        if raw_meta is None:
            raise CacheMissError(f'No cached response for {method} {url}.')

        try:
            meta = json.loads(raw_meta)
            entry = CachedResponseModel(
                url=meta['url'],
                status=int(meta['status']),
                headers=dict(meta['headers']),
                stored_at=datetime.fromisoformat(meta['stored_at']),
                body=self._replay(body_key, int(meta['chunks'])),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise CacheMissError(f'Damaged cache entry for {method} {url}.') from e

        if chunks != int(meta['chunks']):
            raise CacheMissError(f'Incomplete cache entry for {method} {url} ({chunks}/{meta["chunks"]} chunks).')

        return entry

    async def put(self, url: str, status: int, headers: Headers, body: ByteStream, method: str = 'GET') -> None:
        """Store a response, consuming `body` chunk by chunk

        Each chunk is appended to a pending list whose expiry is refreshed on
        every append, so an abandoned write disappears on its own. When the
        body ends, the pending list is renamed into place and the metadata is
        written in the same transaction.

        Raises:
            CachePutError:
                If Redis rejects a write, or `body` raises CachePutError
                (the copy was abandoned by the producer).
        """
        meta_key = self.keys.response_meta_key(method, url)
        body_key = self.keys.response_body_key(method, url)
        pending_key = self.keys.pending_body_key(method, url, uuid.uuid4().hex)

        chunks = 0
        try:
            async for chunk in body:
                async with self.redis.pipeline(transaction=False) as pipe:
                    pipe.rpush(pending_key, chunk)
                    pipe.expire(pending_key, TTL.PENDING_BODY)
                    await pipe.execute()
                chunks += 1

            meta = {
                'url': url,
                'status': status,
                'headers': dict(headers),
                'chunks': chunks,
                'stored_at': datetime.now(UTC).isoformat(),
            }
            async with self.redis.pipeline(transaction=True) as pipe:
                if chunks:
                    pipe.rename(pending_key, body_key)
                    pipe.expire(body_key, self.ttl)
                else:
                    pipe.delete(body_key)
                pipe.set(meta_key, json.dumps(meta), ex=self.ttl)
                await pipe.execute()
        except CachePutError:
            await self._discard(pending_key)
            raise
        except redis.exceptions.RedisError as e:
            await self._discard(pending_key)
            raise CachePutError(f'Failed to store cached response for {method} {url}.') from e

        logger.debug('Stored response in cache.', extra={'url': url, 'chunks': chunks})

    async def _replay(self, body_key: str, chunks: int) -> AsyncIterator[bytes]:
        for start in range(0, chunks, REPLAY_BATCH):
            batch = await self.redis.lrange(body_key, start, start + REPLAY_BATCH - 1)
            if not batch:
                # Status and headers are already on the wire; all we can do is stop early
                logger.warning('Cached body vanished while streaming.', extra={'key': body_key, 'offset': start})
                return
            for chunk in batch:
                yield chunk

    async def _discard(self, pending_key: str) -> None:
        # Best effort: pending keys expire on their own
        with contextlib.suppress(redis.exceptions.RedisError):
            await self.redis.delete(pending_key)
