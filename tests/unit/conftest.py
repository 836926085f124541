"""Shared fixtures: in-memory DAOs, a fake upstream file host and a test client

The fakes implement the abstract base DAOs so services and handlers can be
exercised without Redis or network access.
"""

import re
from datetime import datetime, UTC

import httpx
import pytest
from fastapi.testclient import TestClient

from gitmirror.app import Gateway, create_app
from gitmirror.models import ShortLinkModel, CachedResponseModel
from gitmirror.dao.base import ShortLinkBaseDAO, ResponseCacheBaseDAO
from gitmirror.dao.exceptions import ShortLinkAlreadyExistsError, ShortLinkNotFoundError, CacheMissError
from gitmirror.services import ShortLinkRegistry, MetadataResolver, ProxyCacheEngine
from gitmirror.utils.config import GatewaySettings


_RANGE_RE = re.compile(r'bytes=(\d+)-(\d*)')


# -------------------------------
# In-memory DAOs
# -------------------------------


class InMemoryShortLinkDAO(ShortLinkBaseDAO):
    def __init__(self):
        self.links: dict[str, str] = {}
        self.codes: dict[str, str] = {}
        self.inserts: list[tuple[str, bool]] = []

    async def insert(self, short_link, force=False, **kwargs):
        self.inserts.append((short_link.code, force))
        if not force and short_link.code in self.links:
            raise ShortLinkAlreadyExistsError(f"Short link with code '{short_link.code}' already exists.")
        self.links[short_link.code] = short_link.target
        return self

    async def get(self, code, **kwargs):
        if code not in self.links:
            raise ShortLinkNotFoundError(f"Short link with code '{code}' not found.")
        return ShortLinkModel(code=code, target=self.links[code])

    async def find(self, url_hash, **kwargs):
        return self.codes.get(url_hash)

    async def index(self, url_hash, code, **kwargs):
        return self.codes.setdefault(url_hash, code)


class InMemoryResponseCache(ResponseCacheBaseDAO):
    def __init__(self):
        self.entries: dict[tuple[str, str], tuple[int, dict, list[bytes]]] = {}

    async def match(self, url, method='GET'):
        if (method, url) not in self.entries:
            raise CacheMissError(f'No cached response for {method} {url}.')
        status, headers, chunks = self.entries[(method, url)]

        async def body():
            for chunk in chunks:
                yield chunk

        return CachedResponseModel(url=url, status=status, headers=dict(headers), stored_at=datetime.now(UTC), body=body())

    async def put(self, url, status, headers, body, method='GET'):
        chunks = [chunk async for chunk in body]
        self.entries[(method, url)] = (status, dict(headers), chunks)


# -------------------------------
# Fake upstream host
# -------------------------------


class FakeUpstream:
    """httpx.MockTransport handler serving registered files

    Supports HEAD, single `bytes=a-b` ranges and injected transport errors.
    Unknown URLs answer 404.
    """

    def __init__(self):
        self.files: dict[str, tuple[int, dict[str, str], bytes]] = {}
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None
        self.head_status: int | None = None

    def add(self, url: str, body: bytes = b'', status: int = 200, headers: dict[str, str] | None = None) -> None:
        self.files[url] = (status, headers or {}, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error

        status, headers, body = self.files.get(str(request.url), (404, {}, b'Not Found'))
        headers = {'content-length': str(len(body)), **headers}

        if request.method == 'HEAD':
            if self.head_status is not None:
                return httpx.Response(self.head_status, stream=httpx.ByteStream(b''))
            return httpx.Response(status, headers=headers, stream=httpx.ByteStream(b''))

        match = _RANGE_RE.fullmatch(request.headers.get('range', ''))
        if status == 200 and match:
            start = int(match.group(1))
            end = int(match.group(2)) if match.group(2) else len(body) - 1
            part = body[start : end + 1]
            headers.update({'content-length': str(len(part)), 'content-range': f'bytes {start}-{end}/{len(body)}'})
            return httpx.Response(206, headers=headers, stream=httpx.ByteStream(part))

        return httpx.Response(status, headers=headers, stream=httpx.ByteStream(body))


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture
def settings(app_prefix) -> GatewaySettings:
    # Small chunks so bodies span several chunks
    return GatewaySettings(chunk_size=4, probe_timeout=0.5, prefix=app_prefix)


@pytest.fixture
def link_dao() -> InMemoryShortLinkDAO:
    return InMemoryShortLinkDAO()


@pytest.fixture
def response_cache() -> InMemoryResponseCache:
    return InMemoryResponseCache()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http_client(upstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream), follow_redirects=True)


@pytest.fixture
def gateway(settings, link_dao, response_cache, http_client) -> Gateway:
    return Gateway(
        settings=settings,
        registry=ShortLinkRegistry(settings, link_dao),
        resolver=MetadataResolver(settings, http_client),
        engine=ProxyCacheEngine(settings, http_client, response_cache),
    )


@pytest.fixture
def client(gateway):
    with TestClient(create_app(gateway=gateway), base_url='https://dl.example.org') as test_client:
        yield test_client
