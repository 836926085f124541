"""Detached cache copy of a streamed response

The proxy engine streams the upstream body to the client and hands each chunk
to a CacheWriter. The writer buffers chunks in a bounded queue that a
background task drains into the response cache. The client stream never
waits on the cache: if the buffer overflows, the copy is abandoned instead.

Lifecycle:
    start()         spawn the background task
    feed(chunk)     enqueue a chunk (abandons the copy on overflow)
    finish()        the body ended cleanly, commit the copy
    abandon(reason) the body did not end cleanly, discard the copy
    wait()          await the background task (never raises)
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from gitmirror.types import Headers
from gitmirror.dao.base import ResponseCacheBaseDAO
from gitmirror.dao.exceptions import CachePutError


logger = logging.getLogger(__name__)

_END = object()
_ABANDON = object()


class CacheWriter:
    """Copy one streamed response body into the response cache in the background

    Attributes:
        cache (ResponseCacheBaseDAO):
            Cache the copy is written to.
        url (str):
            Normalized target URL the response belongs to.
        status (int):
            Upstream status code stored with the copy.
        headers (dict[str, str]):
            Rewritten response headers stored with the copy.
        max_chunks (int):
            Chunks that may wait in the buffer before the copy is abandoned.
        abandon_reason (str | None):
            Why the copy was abandoned, None while it is still wanted.
    """

    def __init__(self, cache: ResponseCacheBaseDAO, url: str, status: int, headers: Headers, max_chunks: int):
        self.cache = cache
        self.url = url
        self.status = status
        self.headers = dict(headers)
        self.max_chunks = max_chunks
        self.abandon_reason: str | None = None
        self._closed = False
        self._queue: asyncio.Queue = asyncio.Queue()
        self._task: asyncio.Task | None = None

    @property
    def started(self) -> bool:
        return self._task is not None

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._run(), name=f'cache-writer:{self.url}')
        self._task.add_done_callback(self._log_outcome)

    def feed(self, chunk: bytes) -> None:
        if self._closed:
            return
        # The queue itself is unbounded so the end markers always fit
        if self._queue.qsize() >= self.max_chunks:
            self.abandon('cache buffer full')
            return
        self._queue.put_nowait(chunk)

    def finish(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_END)

    def abandon(self, reason: str) -> None:
        if self._closed:
            return
        self._closed = True
        self.abandon_reason = reason
        self._queue.put_nowait(_ABANDON)

    async def wait(self) -> None:
        if self._task is not None:
            await asyncio.wait([self._task])

    async def _body(self) -> AsyncIterator[bytes]:
        while True:
            item = await self._queue.get()
            if item is _END:
                return
            if item is _ABANDON:
                raise CachePutError(f'Cache copy abandoned: {self.abandon_reason}')
            yield item

    async def _run(self) -> None:
        await self.cache.put(self.url, self.status, self.headers, self._body())

    def _log_outcome(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.info('Cache copy cancelled.', extra={'url': self.url})
            return

        error = task.exception()
        if error is None:
            logger.info('Stored response in cache.', extra={'url': self.url})
        elif self.abandon_reason is not None:
            logger.info('Cache copy abandoned.', extra={'url': self.url, 'reason': self.abandon_reason})
        else:
            logger.warning('Failed to store response in cache.', extra={'url': self.url}, exc_info=error)
