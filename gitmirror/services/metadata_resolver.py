"""Metadata resolver

Answers "what is behind this URL" (filename, size, rough type) without
downloading the file: a HEAD request first, then a one-byte ranged GET for
hosts that don't answer HEAD properly. Each request runs under a deadline
that cancels it in flight.
"""

import asyncio
import logging
import re

import httpx

from gitmirror.models import ProbeResultModel
from gitmirror.exceptions import UpstreamUnreachableError
from gitmirror.utils.config import GatewaySettings
from gitmirror.utils.urls import normalize_url
from gitmirror.utils.filenames import filename_from_headers
from gitmirror.utils.classify import classify_target


logger = logging.getLogger(__name__)

_CONTENT_RANGE_TOTAL_RE = re.compile(r'/\s*(\d+)\s*$')


def _content_size(status: int, headers: httpx.Headers) -> int:
    """Full size of the remote file in bytes, 0 when unknown

    A 206 answer to the `bytes=0-0` probe carries a Content-Length of 1, so the
    total after the slash in `Content-Range: bytes 0-0/<total>` is used
    instead. Other answers use Content-Length.
    """
    if status == 206:
        match = _CONTENT_RANGE_TOTAL_RE.search(headers.get('content-range', ''))
        if match:
            return int(match.group(1))
    try:
        return max(int(headers.get('content-length', '0')), 0)
    except ValueError:
        return 0


class MetadataResolver:
    """Probe allow-listed URLs for download metadata

    Attributes:
        settings (GatewaySettings):
            Allow-list, probe deadline and upstream User-Agent.
        client (httpx.AsyncClient):
            Shared HTTP client (redirects are followed per request).
    """

    def __init__(self, settings: GatewaySettings, client: httpx.AsyncClient):
        self.settings = settings
        self.client = client

    async def _request(self, method: str, url: str, headers: dict[str, str]) -> tuple[int, httpx.Headers]:
        # Only status and headers are needed; the body is never read
        async with asyncio.timeout(self.settings.probe_timeout):
            async with self.client.stream(method, url, headers=headers, follow_redirects=True) as response:
                return response.status_code, response.headers

    async def probe(self, url: str) -> ProbeResultModel:
        """Resolve name, size and type of the file behind `url`

        Procedure:
            - Step 1: normalize the URL (raises InvalidURLError)
            - Step 2: HEAD the URL
            - Step 3: if HEAD failed or gave no Content-Length, GET `bytes=0-0`
            - Step 4: derive filename, size and type

        Raises:
            InvalidURLError:
                If the URL is malformed or its host is not allowed.
            UpstreamUnreachableError:
                If neither request succeeds in time with a 2xx status.
        """
        target = normalize_url(url, self.settings.allowed_hosts)
        headers = {'User-Agent': self.settings.upstream_user_agent}

        try:
            status, response_headers = await self._request('HEAD', target, headers)
            if not httpx.codes.is_success(status) or 'content-length' not in response_headers:
                logger.debug('HEAD probe inconclusive, retrying with a ranged GET.', extra={'url': target, 'status': status})
                status, response_headers = await self._request('GET', target, {**headers, 'Range': 'bytes=0-0'})
        except TimeoutError as e:
            raise UpstreamUnreachableError('Upstream request timed out') from e
        except httpx.HTTPError as e:
            raise UpstreamUnreachableError(str(e) or type(e).__name__) from e

        if not httpx.codes.is_success(status):
            logger.debug('Probe failed.', extra={'url': target, 'status': status})
            raise UpstreamUnreachableError('File not reachable')

        return ProbeResultModel(
            name=filename_from_headers(target, response_headers),
            size=_content_size(status, response_headers),
            type=classify_target(target),
        )
