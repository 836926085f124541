from fastapi import Request, Response
from fastapi.responses import HTMLResponse

from gitmirror.utils.helpers import guarantee_500_response
from gitmirror.handlers.responses import render_template


@guarantee_500_response
async def handle(request: Request) -> Response:
    """Serve the single-page UI"""
    return HTMLResponse(
        render_template('index.html', request),
        headers={
            'X-Content-Type-Options': 'nosniff',
            'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
        },
    )
