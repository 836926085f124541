import logging

from fastapi import Request, Response

from gitmirror.exceptions import InvalidURLError
from gitmirror.dao.exceptions import ShortLinkNotFoundError
from gitmirror.router import SHORT_LINK_PREFIX
from gitmirror.utils.helpers import guarantee_500_response
from gitmirror.utils.urls import normalize_url
from gitmirror.handlers.responses import response_404_page
from gitmirror.handlers.resolve_link.constants import (
    SHORT_LINK_NOT_FOUND,
    TARGET_NOT_ALLOWED,
    RESOLVE_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
async def handle(request: Request) -> Response:
    """Handle /d/<code> requests

    This handler follows this procedure to serve short links:
    - Step 1: Extract the short code from the request path
    - Step 2: Look up the stored target URL
    - Step 3: Re-validate the target against the current allow-list
    - Step 4: Serve the target through the proxy-cache engine

    HTTP responses:
        2xx/3xx/4xx/5xx: Proxied upstream response (see ProxyCacheEngine)
        404: Unknown short code, or target no longer allowed (HTML page)
        502: Upstream host unreachable
    """
    gateway = request.app.state.gateway

    # 1- Extract short code from request path
    code = request.url.path[len(SHORT_LINK_PREFIX):]

    # 2- Look up target URL
    try:
        link = await gateway.registry.resolve(code)
    except ShortLinkNotFoundError:
        logger.info('Short link not found. Responding with 404.', extra={'code': code, 'event': SHORT_LINK_NOT_FOUND})
        return response_404_page(request)

    # 3- Re-validate target URL
    try:
        target = normalize_url(link.target, gateway.settings.allowed_hosts)
    except InvalidURLError:
        logger.info(
            'Stored target is no longer allowed. Responding with 404.',
            extra={'code': code, 'target': link.target, 'event': TARGET_NOT_ALLOWED},
        )
        return response_404_page(request)

    # 4- Proxy target URL
    logger.info('Resolved short link.', extra={'code': code, 'target': target, 'event': RESOLVE_SUCCESS})
    return await gateway.engine.serve(request, target)
