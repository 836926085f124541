"""Response builders shared by the request handlers

Every API response carries the gateway's CORS headers so the UI can be
served from another origin.
"""

from collections.abc import Mapping
from importlib import resources
from string import Template

from fastapi import Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from gitmirror.utils.helpers import base_url


def _gateway(request: Request):
    return request.app.state.gateway


def cors_headers(request: Request) -> dict[str, str]:
    return dict(_gateway(request).settings.cors_headers)


def response_json(request: Request, body: dict, status_code: int = 200, headers: Mapping[str, str] | None = None) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers={**cors_headers(request), **(headers or {})})


def response_400(request: Request, message: str, **details) -> JSONResponse:
    return response_json(request, {'error': message, **details}, status_code=400)


def response_405(request: Request, allow: tuple[str, ...]) -> JSONResponse:
    return response_json(request, {'error': 'Method Not Allowed'}, status_code=405, headers={'Allow': ', '.join(allow)})


def response_204(request: Request) -> Response:
    return Response(status_code=204, headers=cors_headers(request))


def response_plain_400(message: str = 'Bad Request') -> PlainTextResponse:
    return PlainTextResponse(message, status_code=400)


def render_template(name: str, request: Request) -> str:
    """Render a bundled HTML template, substituting `$origin` with the public base URL"""
    source = resources.files('gitmirror.templates').joinpath(name).read_text(encoding='utf-8')
    return Template(source).safe_substitute(origin=base_url(request))


def response_404_page(request: Request) -> HTMLResponse:
    return HTMLResponse(render_template('not_found.html', request), status_code=404)
