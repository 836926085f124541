"""Unit tests for the fetch_meta handler (GET /api/meta?url=...)

Test coverage includes:
    1. Successful probes return name, size, type and ok=true.
    2. Missing, rejected and unreachable URLs return HTTP 400.
    3. Unsupported methods return HTTP 405.
"""

import httpx


URL = 'https://github.com/a/b/releases/download/v1/app.zip'


def test_fetch_meta(client, upstream):
    upstream.add(URL, b'x' * 1234)

    response = client.get('/api/meta', params={'url': 'github.com/a/b/releases/download/v1/app.zip'})

    assert response.status_code == 200
    assert response.json() == {'name': 'app.zip', 'size': 1234, 'type': 'Release', 'ok': True}
    assert response.headers['access-control-allow-origin'] == '*'


def test_missing_url(client):
    response = client.get('/api/meta')

    assert response.status_code == 400
    assert response.json() == {'error': 'URL missing'}


def test_host_not_allowed(client, upstream):
    response = client.get('/api/meta', params={'url': 'example.com/file.zip'})

    assert response.status_code == 400
    assert response.json() == {'error': 'Failed to fetch metadata', 'details': 'Host not allowed'}
    assert upstream.requests == []


def test_unreachable_file(client):
    response = client.get('/api/meta', params={'url': URL})

    assert response.status_code == 400
    assert response.json() == {'error': 'Failed to fetch metadata', 'details': 'File not reachable'}


def test_upstream_down(client, upstream):
    upstream.error = httpx.ConnectError('connection refused')

    response = client.get('/api/meta', params={'url': URL})

    assert response.status_code == 400
    assert response.json()['details'] == 'connection refused'


def test_method_not_allowed(client):
    response = client.post('/api/meta')

    assert response.status_code == 405
    assert response.headers['allow'] == 'GET, HEAD, OPTIONS'
