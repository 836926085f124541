"""URL normalization and allow-list enforcement

Every URL the gateway fetches, caches or shortens goes through
`normalize_url()` first. The function is idempotent:

    >>> normalize_url('github.com/a/b/archive/refs/heads/main.zip')
    'https://github.com/a/b/archive/refs/heads/main.zip'
    >>> normalize_url(normalize_url('GitHub.com/a/b'))
    'https://github.com/a/b'
    >>> normalize_url('example.com/file.zip')
    Traceback (most recent call last):
        ...
    gitmirror.exceptions.HostNotAllowedError: Host not allowed

NOTE:
    No canonicalization happens beyond what the parser does: query parameter
    order and explicit default ports are preserved, so `?a=1&b=2` and
    `?b=2&a=1` are different targets (and different cache/dedup keys).
"""

import re
from collections.abc import Collection
from urllib.parse import urlsplit, urlunsplit, quote

from gitmirror.exceptions import MalformedURLError, HostNotAllowedError
from gitmirror.utils.constants import DEFAULT_ALLOWED_HOSTS


__all__ = ['normalize_url', 'target_from_path']

_SCHEME_RE = re.compile(r'^https?://', re.IGNORECASE)
_COLLAPSED_SCHEME_RE = re.compile(r'^(https?):/+', re.IGNORECASE)

# Characters left untouched when re-quoting. '%' is kept so existing escapes survive.
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = _PATH_SAFE + '?'


def normalize_url(raw: str | None, allowed_hosts: Collection[str] = DEFAULT_ALLOWED_HOSTS) -> str:
    """Canonicalize a user-supplied string into an absolute, allow-listed URL

    Steps:
        - trim surrounding whitespace
        - prepend 'https://' unless the string starts with 'http://' or 'https://'
        - parse and lowercase scheme and host
        - reject URLs without a host or with an invalid port (MalformedURLError)
        - reject hosts outside the allow-list (HostNotAllowedError)
        - percent-encode unsafe characters in path, query and fragment

    Args:
        raw (str | None):
            URL as typed by a user, with or without scheme.
        allowed_hosts (Collection[str]):
            Lowercase hostnames the gateway may talk to.

    Returns:
        str: the normalized URL.

    Raises:
        MalformedURLError:
            If the string can't be parsed into an absolute URL with a host.
        HostNotAllowedError:
            If the host is not in `allowed_hosts`.
    """
    url = str(raw or '').strip()
    if not _SCHEME_RE.match(url):
        url = f'https://{url}'

    try:
        parts = urlsplit(url)
        host = parts.hostname
        port = parts.port
    except ValueError as e:
        raise MalformedURLError(f'Invalid URL: {raw!r}') from e

    if not host:
        raise MalformedURLError(f'Invalid URL: {raw!r}')
    if host not in allowed_hosts:
        raise HostNotAllowedError('Host not allowed')

    userinfo, _, _ = parts.netloc.rpartition('@')
    netloc = host if port is None else f'{host}:{port}'
    if userinfo:
        netloc = f'{userinfo}@{netloc}'

    return urlunsplit(
        (
            parts.scheme,
            netloc,
            quote(parts.path or '/', safe=_PATH_SAFE),
            quote(parts.query, safe=_QUERY_SAFE),
            quote(parts.fragment, safe=_QUERY_SAFE),
        )
    )


def target_from_path(path: str, allowed_hosts: Collection[str] = DEFAULT_ALLOWED_HOSTS) -> str:
    """Turn a direct-proxy request path into a normalized target URL

    The leading slash is dropped and the rest is treated as a URL. Proxies and
    browsers tend to collapse '//' in paths, so 'https:/github.com/...' is
    restored to 'https://github.com/...' before normalizing.

    Example:
        >>> target_from_path('/https:/github.com/a/b/releases/download/v1/app.zip')
        'https://github.com/a/b/releases/download/v1/app.zip'
        >>> target_from_path('/raw.githubusercontent.com/a/b/main/README.md')
        'https://raw.githubusercontent.com/a/b/main/README.md'
    """
    raw = path[1:] if path.startswith('/') else path
    raw = _COLLAPSED_SCHEME_RE.sub(lambda m: f'{m.group(1)}://', raw, count=1)
    return normalize_url(raw, allowed_hosts)
