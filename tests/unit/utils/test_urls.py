"""Unit tests for URL normalization in urls.py

Test coverage includes:

1. normalize_url()
   - Prepends https:// to scheme-less input and trims whitespace.
   - Lowercases scheme and host, keeps ports, queries and fragments.
   - Percent-encodes unsafe characters without double-encoding escapes.
   - Is idempotent.
   - Rejects hosts outside the allow-list and unparsable input.

2. target_from_path()
   - Restores collapsed scheme slashes.
   - Accepts paths without scheme.
"""

import pytest

from gitmirror.exceptions import HostNotAllowedError, MalformedURLError, InvalidURLError
from gitmirror.utils.urls import normalize_url, target_from_path


# -------------------------------
# 1. normalize_url()
# -------------------------------


@pytest.mark.parametrize(
    'raw, expected',
    [
        ('github.com/a/b', 'https://github.com/a/b'),
        ('  https://github.com/a/b/archive/main.zip  ', 'https://github.com/a/b/archive/main.zip'),
        ('HTTP://GitHub.com/a/b', 'http://github.com/a/b'),
        ('https://github.com', 'https://github.com/'),
        ('raw.githubusercontent.com/u/r/main/README.md', 'https://raw.githubusercontent.com/u/r/main/README.md'),
        ('https://github.com:443/a?b=2&a=1#top', 'https://github.com:443/a?b=2&a=1#top'),
    ],
)
def test_normalize_url(raw, expected):
    """Ensure normalize_url() canonicalizes scheme, host and empty paths."""
    assert normalize_url(raw) == expected


def test_normalize_url_percent_encodes_unsafe_characters():
    """Ensure spaces are encoded while existing escapes are preserved."""
    assert normalize_url('github.com/a/my file.zip') == 'https://github.com/a/my%20file.zip'
    assert normalize_url('github.com/a/my%20file.zip') == 'https://github.com/a/my%20file.zip'


@pytest.mark.parametrize(
    'raw',
    [
        'github.com/a/b',
        'https://GITHUB.com/a/my file.zip?x=a b',
        'objects.githubusercontent.com/x/y',
    ],
)
def test_normalize_url_is_idempotent(raw):
    """Ensure normalizing a normalized URL is a no-op."""
    once = normalize_url(raw)
    assert normalize_url(once) == once


@pytest.mark.parametrize('raw', ['example.com/file.zip', 'https://evil.github.com.example.org/x', 'https://github.co/x'])
def test_normalize_url_rejects_foreign_hosts(raw):
    """Ensure hosts outside the allow-list raise HostNotAllowedError."""
    with pytest.raises(HostNotAllowedError, match='Host not allowed'):
        normalize_url(raw)


@pytest.mark.parametrize('raw', ['', None, '   ', 'https://', 'https://github.com:99999/a'])
def test_normalize_url_rejects_malformed_input(raw):
    """Ensure empty, hostless and invalid-port URLs raise MalformedURLError."""
    with pytest.raises(MalformedURLError):
        normalize_url(raw)


def test_normalize_url_with_custom_allow_list():
    """Ensure the allow-list is configurable."""
    assert normalize_url('example.org/x', allowed_hosts={'example.org'}) == 'https://example.org/x'
    with pytest.raises(InvalidURLError):
        normalize_url('github.com/x', allowed_hosts={'example.org'})


# -------------------------------
# 2. target_from_path()
# -------------------------------


@pytest.mark.parametrize(
    'path, expected',
    [
        ('/https://github.com/a/b/releases/download/v1/app.zip', 'https://github.com/a/b/releases/download/v1/app.zip'),
        ('/https:/github.com/a/b/releases/download/v1/app.zip', 'https://github.com/a/b/releases/download/v1/app.zip'),
        ('/http:/github.com/a', 'http://github.com/a'),
        ('/github.com/a/b/archive/main.zip', 'https://github.com/a/b/archive/main.zip'),
        ('/raw.githubusercontent.com/a/b/main/README.md', 'https://raw.githubusercontent.com/a/b/main/README.md'),
    ],
)
def test_target_from_path(path, expected):
    """Ensure direct proxy paths map to normalized targets."""
    assert target_from_path(path) == expected


def test_target_from_path_rejects_foreign_host():
    with pytest.raises(HostNotAllowedError):
        target_from_path('/example.com/file.zip')
