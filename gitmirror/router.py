"""Request routing

`resolve_route()` is a pure function of the request method and path, so the
routing table can be tested without an application. Rules are evaluated top
to bottom and the first match wins:

    1. OPTIONS <any>                 -> PREFLIGHT
    2. GET|HEAD /                    -> UI
    3. <any> /d/<code>               -> RESOLVE_LINK
    4. POST /api/shorten             -> SHORTEN
    5. GET|HEAD /api/meta            -> META
    6. <other> /api/shorten|meta     -> METHOD_NOT_ALLOWED
    7. <any> /<non-empty>            -> PROXY
    8. <any> /                       -> BAD_REQUEST
"""

from enum import StrEnum


SHORT_LINK_PREFIX = '/d/'
SHORTEN_PATH = '/api/shorten'
META_PATH = '/api/meta'

# Methods accepted by the API endpoints (used for the Allow header on 405)
API_METHODS = {
    SHORTEN_PATH: ('POST', 'OPTIONS'),
    META_PATH: ('GET', 'HEAD', 'OPTIONS'),
}


class Route(StrEnum):
    PREFLIGHT = 'preflight'
    UI = 'ui'
    RESOLVE_LINK = 'resolve_link'
    SHORTEN = 'shorten'
    META = 'meta'
    METHOD_NOT_ALLOWED = 'method_not_allowed'
    PROXY = 'proxy'
    BAD_REQUEST = 'bad_request'


def resolve_route(method: str, path: str) -> Route:
    """Map a request to a route

    Example:
        >>> resolve_route('GET', '/d/Kx7pQa')
        <Route.RESOLVE_LINK: 'resolve_link'>
        >>> resolve_route('GET', '/github.com/a/b/archive/main.zip')
        <Route.PROXY: 'proxy'>
        >>> resolve_route('PUT', '/api/meta')
        <Route.METHOD_NOT_ALLOWED: 'method_not_allowed'>
    """
    method = method.upper()

    if method == 'OPTIONS':
        return Route.PREFLIGHT
    if path == '/' and method in ('GET', 'HEAD'):
        return Route.UI
    if path.startswith(SHORT_LINK_PREFIX):
        return Route.RESOLVE_LINK
    if path == SHORTEN_PATH and method == 'POST':
        return Route.SHORTEN
    if path == META_PATH and method in ('GET', 'HEAD'):
        return Route.META
    if path in API_METHODS:
        return Route.METHOD_NOT_ALLOWED
    if path.lstrip('/'):
        return Route.PROXY
    return Route.BAD_REQUEST
