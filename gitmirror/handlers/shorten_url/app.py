import logging

from fastapi import Request, Response

from gitmirror.exceptions import InvalidURLError
from gitmirror.utils.helpers import get_short_url, guarantee_500_response
from gitmirror.handlers.responses import response_json, response_400
from gitmirror.handlers.shorten_url.constants import (
    INVALID_JSON_BODY,
    MISSING_URL,
    INVALID_URL,
    SHORTEN_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
async def handle(request: Request) -> Response:
    """Handle POST /api/shorten requests

    This handler follows this procedure to shorten URLs:
    - Step 1: Extract the target URL from the JSON request body
    - Step 2: Create (or look up) the short link via the registry
    - Step 3: Respond with the absolute short URL

    HTTP responses:
        200: Successful URL shortening
            short: absolute short URL (<origin>/d/<code>)
            long: normalized target URL
            code: short code
        400: Bad client request
            error: invalid JSON body, missing url or rejected url
        500: Internal server error
            error: 'Internal Server Error'

    Example:
        >>> response = client.post('/api/shorten', json={'url': 'github.com/a/b/archive/main.zip'})
        >>> response.json()
        {'short': 'https://dl.example.org/d/Kx7pQa', 'long': 'https://github.com/a/b/archive/main.zip', 'code': 'Kx7pQa'}
    """
    gateway = request.app.state.gateway

    # 1- Extract target URL from request body
    try:
        payload = await request.json()
    except ValueError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(request, 'Invalid JSON body')

    url = payload.get('url') if isinstance(payload, dict) else None
    if not url or not isinstance(url, str):
        logger.info('Missing "url" in request body. Responding with 400.', extra={'event': MISSING_URL})
        return response_400(request, 'URL is required')

    # 2- Create the short link
    try:
        link = await gateway.registry.create(url)
    except InvalidURLError as e:
        logger.info(
            'Rejected URL. Responding with 400.',
            extra={'url': url, 'event': INVALID_URL, 'error_code': e.error_code},
        )
        return response_400(request, str(e))

    # 3- Respond with the short URL
    logger.info(
        'Shortened URL. Responding with 200.',
        extra={'code': link.code, 'target': link.target, 'event': SHORTEN_SUCCESS},
    )
    return response_json(
        request,
        {
            'short': get_short_url(link.code, request),
            'long': link.target,
            'code': link.code,
        },
    )
