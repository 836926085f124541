import logging

from fastapi import Request, Response

from gitmirror.exceptions import InvalidURLError, UpstreamUnreachableError
from gitmirror.utils.helpers import guarantee_500_response
from gitmirror.handlers.responses import response_json, response_400
from gitmirror.handlers.fetch_meta.constants import (
    MISSING_URL,
    METADATA_UNAVAILABLE,
    METADATA_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
async def handle(request: Request) -> Response:
    """Handle GET /api/meta?url=<url> requests

    HTTP responses:
        200: Metadata resolved
            name, size, type, ok=true
        400: Bad client request
            error: 'URL missing', or 'Failed to fetch metadata' with details
    """
    gateway = request.app.state.gateway

    url = request.query_params.get('url')
    if not url:
        logger.info('Missing "url" query parameter. Responding with 400.', extra={'event': MISSING_URL})
        return response_400(request, 'URL missing')

    try:
        probe = await gateway.resolver.probe(url)
    except (InvalidURLError, UpstreamUnreachableError) as e:
        logger.info(
            'Failed to fetch metadata. Responding with 400.',
            extra={'url': url, 'event': METADATA_UNAVAILABLE, 'error_code': e.error_code},
        )
        return response_400(request, 'Failed to fetch metadata', details=str(e))

    logger.info('Fetched metadata. Responding with 200.', extra={'url': url, 'event': METADATA_SUCCESS})
    return response_json(request, {**probe.to_dict(), 'ok': True})
