"""Helper utilities for the gateway's request handlers.

Functions:
    base_url() -> str
        Extract the public base URL from an incoming request
    get_short_url() -> str
        Get string representation of short URL for a given shortcode
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected handler exceptions into a JSON 500 response

Example:
    Typical usage inside a handler:

        >>> from gitmirror.utils.helpers import get_short_url
        >>> get_short_url('Kx7pQa', request)   # request for https://dl.example.org/api/shorten
        'https://dl.example.org/d/Kx7pQa'
"""

import os
import logging
import functools
from collections.abc import Callable, Awaitable

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from gitmirror.exceptions import MissingEnvironmentVariableError
from gitmirror.utils.constants import CORS_HEADERS, UNKNOWN_INTERNAL_SERVER_ERROR
from gitmirror.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def base_url(request: Request) -> str:
    """Extract public base URL from an incoming request

    Scheme and host come from the request as seen by the ASGI server, so run
    uvicorn with --proxy-headers behind a TLS-terminating load balancer.

    Args:
        request (Request): incoming request

    Returns:
        str: Base URL without trailing slash, e.g. "https://dl.example.org"
    """
    return str(request.base_url).rstrip('/')


def get_short_url(shortcode: str, request: Request) -> str:
    """Get string representation of a short link

    Args:
        shortcode (str): shortcode
        request (Request): incoming request (used for the public base URL)

    Returns:
        str: short url string representation
    """
    return f'{base_url(request)}/d/{shortcode}'


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable[..., Awaitable[Response]]) -> Callable[..., Awaitable[Response]]:
    """Decorator: respond with a JSON 500 when a handler raises unexpectedly

    The exception is logged with its traceback and never leaks to the client.
    When running locally (APP_ENV=local) the exception is re-raised instead so
    the ASGI server prints it.

    Example:
        >>> @guarantee_500_response
        ... async def handle(request):
        ...     raise RuntimeError('boom')
        >>> (await handle(request)).status_code
        500
    """

    @functools.wraps(handler)
    async def wrapper(*args, **kwargs) -> Response:
        try:
            return await handler(*args, **kwargs)
        except Exception:
            if running_locally():
                raise
            logger.exception(
                'Unhandled exception in %s. Responding with 500.',
                handler.__module__,
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return JSONResponse(
                {'error': 'Internal Server Error', 'error_code': UNKNOWN_INTERNAL_SERVER_ERROR},
                status_code=500,
                headers=CORS_HEADERS,
            )

    return wrapper
