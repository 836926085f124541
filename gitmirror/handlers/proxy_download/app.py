import logging

from fastapi import Request, Response

from gitmirror.exceptions import InvalidURLError
from gitmirror.utils.helpers import guarantee_500_response
from gitmirror.utils.urls import target_from_path
from gitmirror.handlers.responses import response_plain_400
from gitmirror.handlers.proxy_download.constants import INVALID_TARGET


logger = logging.getLogger(__name__)


def request_path(request: Request) -> str:
    # raw_path keeps percent-escapes (e.g. %2F) intact
    raw_path = request.scope.get('raw_path')
    return raw_path.decode('latin-1') if raw_path else request.url.path


@guarantee_500_response
async def handle(request: Request) -> Response:
    """Handle direct proxy requests (/<target url>)

    The request path (without its leading slash) is the target URL, e.g.
    /https://github.com/a/b/releases/download/v1/app.zip or
    /raw.githubusercontent.com/a/b/main/README.md. The query string is not
    part of the target.

    HTTP responses:
        2xx/3xx/4xx/5xx: Proxied upstream response (see ProxyCacheEngine)
        400: 'Invalid URL format' (plain text)
        502: Upstream host unreachable
    """
    gateway = request.app.state.gateway

    path = request_path(request)
    try:
        target = target_from_path(path, gateway.settings.allowed_hosts)
    except InvalidURLError as e:
        logger.info(
            'Invalid proxy target. Responding with 400.',
            extra={'path': path, 'event': INVALID_TARGET, 'error_code': e.error_code},
        )
        return response_plain_400('Invalid URL format')

    return await gateway.engine.serve(request, target)
