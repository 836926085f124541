"""Proxy-cache engine

Serves a normalized target URL to a client, from the response cache when
possible and from the upstream host otherwise:

    START -> CACHE_LOOKUP -> HIT  -> RESPOND
                          -> MISS -> UPSTREAM_FETCH -> SUCCESS -> REWRITE -> RESPOND (+ detached CACHE_STORE)
                                                    -> FAILURE -> RESPOND (502)

Only plain GET requests (no Range header) are cacheable. Everything else is
proxied with `X-Cache-Status: BYPASS` and `Cache-Control: no-store`.
"""

import logging
from collections.abc import AsyncIterator

import httpx
from fastapi import Request, Response
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask
from starlette.datastructures import MutableHeaders

from gitmirror.models import CachedResponseModel
from gitmirror.dao.base import ResponseCacheBaseDAO
from gitmirror.dao.exceptions import CacheMissError, DataStoreError
from gitmirror.services.cache_writer import CacheWriter
from gitmirror.utils.config import GatewaySettings
from gitmirror.utils.filenames import filename_from_headers, content_disposition
from gitmirror.utils.constants import (
    CacheStatus,
    CACHE_STATUS_HEADER,
    POWERED_BY_HEADER,
    HOP_BY_HOP_HEADERS,
)


logger = logging.getLogger(__name__)


class ProxyCacheEngine:
    """Stream allow-listed downloads through the response cache

    Attributes:
        settings (GatewaySettings):
            Header policy, cache TTL and streaming parameters.
        client (httpx.AsyncClient):
            Shared HTTP client for upstream requests.
        cache (ResponseCacheBaseDAO):
            Response cache keyed by (GET, target URL).
    """

    def __init__(self, settings: GatewaySettings, client: httpx.AsyncClient, cache: ResponseCacheBaseDAO):
        self.settings = settings
        self.client = client
        self.cache = cache
        self._replaced_headers = frozenset(
            {
                *self.settings.stripped_headers,
                *HOP_BY_HOP_HEADERS,
                *(name.lower() for name in self.settings.cors_headers),
                CACHE_STATUS_HEADER.lower(),
                POWERED_BY_HEADER.lower(),
                'content-disposition',
                'cache-control',
            }
        )

    async def serve(self, request: Request, target: str) -> Response:
        """Deliver `target` to the client

        Args:
            request (Request):
                Incoming client request (method and headers are used, the body is not).
            target (str):
                Normalized, allow-listed URL.

        Returns:
            Response: a streaming response, or a 502 plain text response if
                      the upstream host can't be reached.
        """
        cacheable = request.method == 'GET' and 'range' not in request.headers

        # 1- Cache lookup
        if cacheable:
            entry = await self._lookup(target)
            if entry is not None:
                logger.info('Serving download from cache.', extra={'url': target, 'cache': CacheStatus.HIT})
                return self._replay(entry)

        # 2- Upstream fetch
        upstream_headers = {name: value for name, value in request.headers.items() if name in self.settings.forwarded_headers}
        upstream_headers['user-agent'] = self.settings.upstream_user_agent
        upstream_request = self.client.build_request(request.method, target, headers=upstream_headers)
        try:
            upstream = await self.client.send(upstream_request, stream=True, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning('Upstream request failed. Responding with 502.', extra={'url': target, 'error': str(e)})
            return PlainTextResponse(f'Upstream Error: {str(e) or type(e).__name__}', status_code=502)

        # 3- Rewrite headers
        store = cacheable and upstream.status_code == 200
        status = CacheStatus.MISS if cacheable else CacheStatus.BYPASS
        headers = MutableHeaders()
        for name, value in upstream.headers.multi_items():
            if name not in self._replaced_headers:
                headers.append(name, value)
        headers.update(self.settings.cors_headers)
        headers[CACHE_STATUS_HEADER] = status
        headers[POWERED_BY_HEADER] = self.settings.powered_by
        headers['Content-Disposition'] = content_disposition(filename_from_headers(target, upstream.headers))
        headers['Cache-Control'] = f'public, max-age={self.settings.cache_ttl}, immutable' if store else 'no-store'

        # 4- Stream (and copy into the cache)
        writer = None
        if store:
            writer = CacheWriter(self.cache, target, upstream.status_code, headers, self.settings.cache_buffer_chunks)

        logger.info(
            'Proxying download from upstream.',
            extra={'url': target, 'method': request.method, 'status': upstream.status_code, 'cache': status},
        )
        return StreamingResponse(
            self._relay(upstream, writer),
            status_code=upstream.status_code,
            headers=headers,
            background=BackgroundTask(self._finalize, upstream, writer),
        )

    async def _lookup(self, target: str) -> CachedResponseModel | None:
        try:
            return await self.cache.match(target)
        except CacheMissError:
            return None
        except DataStoreError:
            logger.warning('Cache lookup failed. Treating as a miss.', extra={'url': target}, exc_info=True)
            return None

    def _replay(self, entry: CachedResponseModel) -> StreamingResponse:
        response = StreamingResponse(entry.body, status_code=entry.status)
        for name, value in entry.headers.items():
            response.headers[name] = value
        response.headers.update(self.settings.cors_headers)
        response.headers[CACHE_STATUS_HEADER] = CacheStatus.HIT
        response.headers[POWERED_BY_HEADER] = self.settings.powered_by
        return response

    async def _relay(self, upstream: httpx.Response, writer: CacheWriter | None) -> AsyncIterator[bytes]:
        # The writer starts with the body so an unread response leaves no task behind
        if writer is not None:
            writer.start()

        completed = False
        try:
            async for chunk in upstream.aiter_raw(self.settings.chunk_size):
                if writer is not None:
                    writer.feed(chunk)
                yield chunk
            completed = True
        except httpx.HTTPError:
            logger.warning('Upstream stream broke off.', extra={'url': str(upstream.request.url)}, exc_info=True)
            raise
        finally:
            if writer is not None:
                if completed:
                    writer.finish()
                else:
                    writer.abandon('body not fully delivered')
            await upstream.aclose()

    @staticmethod
    async def _finalize(upstream: httpx.Response, writer: CacheWriter | None) -> None:
        await upstream.aclose()
        if writer is not None:
            await writer.wait()
