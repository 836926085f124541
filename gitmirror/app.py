"""ASGI application factory

`create_app()` builds the FastAPI application. A single catch-all route hands
every request to `resolve_route()` and dispatches to the matching handler
module under gitmirror.handlers.

Shared resources (HTTP client, Redis DAOs) are created in the application
lifespan and bundled into a `Gateway` stored on `app.state.gateway`. Tests
pass a ready-made Gateway instead.

Example:
    >>> import uvicorn
    >>> uvicorn.run(create_app(), host='0.0.0.0', port=8080)
"""

import logging
import contextlib
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import TypeAlias

import httpx
from fastapi import FastAPI, Request, Response

from gitmirror.router import Route, API_METHODS, resolve_route
from gitmirror.dao.redis import ShortLinkRedisDAO
from gitmirror.dao.cache import ResponseCacheRedisDAO
from gitmirror.services import ShortLinkRegistry, MetadataResolver, ProxyCacheEngine
from gitmirror.utils.config import GatewaySettings, load_settings
from gitmirror.handlers.responses import response_204, response_405, response_plain_400
from gitmirror.handlers.shorten_url import app as shorten_url
from gitmirror.handlers.resolve_link import app as resolve_link
from gitmirror.handlers.fetch_meta import app as fetch_meta
from gitmirror.handlers.proxy_download import app as proxy_download
from gitmirror.handlers.render_ui import app as render_ui


logger = logging.getLogger(__name__)

Handler: TypeAlias = Callable[[Request], Awaitable[Response]]

# Connect/pool timeouts only; downloads may legitimately take a long time
UPSTREAM_TIMEOUT = httpx.Timeout(10.0, read=None)

ALL_METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']


@dataclass
class Gateway:
    """Components shared by all handlers"""

    settings: GatewaySettings
    registry: ShortLinkRegistry
    resolver: MetadataResolver
    engine: ProxyCacheEngine


async def handle_preflight(request: Request) -> Response:
    return response_204(request)


async def handle_method_not_allowed(request: Request) -> Response:
    return response_405(request, API_METHODS[request.url.path])


async def handle_bad_request(request: Request) -> Response:
    return response_plain_400()


HANDLERS: dict[Route, Handler] = {
    Route.PREFLIGHT: handle_preflight,
    Route.UI: render_ui.handle,
    Route.RESOLVE_LINK: resolve_link.handle,
    Route.SHORTEN: shorten_url.handle,
    Route.META: fetch_meta.handle,
    Route.METHOD_NOT_ALLOWED: handle_method_not_allowed,
    Route.PROXY: proxy_download.handle,
    Route.BAD_REQUEST: handle_bad_request,
}


@contextlib.asynccontextmanager
async def open_gateway(settings: GatewaySettings) -> AsyncIterator[Gateway]:
    """Create the HTTP client and Redis DAOs, and close them on exit

    Raises:
        DataStoreError:
            If Redis is unreachable at start-up.
    """
    redis_config = settings.redis_kwargs()
    links = ShortLinkRedisDAO(**redis_config, prefix=settings.prefix)
    cache = ResponseCacheRedisDAO(ttl=settings.cache_ttl, **redis_config, prefix=settings.prefix)

    try:
        await links.healthcheck()
        await cache.healthcheck()
        logger.info('Connected to Redis.', extra={'host': settings.redis.get('host'), 'prefix': settings.prefix})

        async with httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT, follow_redirects=True) as client:
            yield Gateway(
                settings=settings,
                registry=ShortLinkRegistry(settings, links),
                resolver=MetadataResolver(settings, client),
                engine=ProxyCacheEngine(settings, client, cache),
            )
    finally:
        await links.aclose()
        await cache.aclose()


def create_app(settings: GatewaySettings | None = None, gateway: Gateway | None = None) -> FastAPI:
    """Build the gateway application

    Args:
        settings (GatewaySettings | None):
            Configuration to start the gateway with. Loaded with
            `load_settings()` at start-up when omitted.
        gateway (Gateway | None):
            Pre-built components. When given, the lifespan creates nothing.
    """

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if gateway is not None:
            yield
            return

        async with open_gateway(settings or load_settings()) as started:
            app.state.gateway = started
            logger.info('Gateway started.')
            yield
        logger.info('Gateway stopped.')

    app = FastAPI(title='GitMirror', lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.gateway = gateway

    @app.api_route('/{path:path}', methods=ALL_METHODS, include_in_schema=False)
    async def dispatch(request: Request) -> Response:
        route = resolve_route(request.method, request.url.path)
        logger.debug('Routing request.', extra={'method': request.method, 'path': request.url.path, 'route': route})
        return await HANDLERS[route](request)

    return app
