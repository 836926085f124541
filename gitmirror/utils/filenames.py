"""Filename extraction and Content-Disposition helpers

Functions:
    filename_from_headers(url, headers) -> str
        Best-effort filename for a download.
    content_disposition(filename) -> str
        'attachment' Content-Disposition value with an RFC 5987 encoded filename.
"""

import re
import codecs
from urllib.parse import urlsplit, unquote, quote

from gitmirror.types import Headers
from gitmirror.utils.constants import DEFAULT_FILENAME


_FILENAME_STAR_RE = re.compile(r'filename\*\s*=\s*([^;]+)', re.IGNORECASE)
_FILENAME_RE = re.compile(r'filename\s*=\s*("?)([^";]+)\1', re.IGNORECASE)
_EXT_VALUE_RE = re.compile(r"^([^']*)'[^']*'(.*)$")
_QUOTES_RE = re.compile(r'''^['"]|['"]$''')

# RFC 5987 attr-char punctuation (alphanumerics and '_.-~' are always kept by quote())
_ATTR_CHAR_SAFE = '!#$&+^`|'


def _decode_ext_value(value: str) -> str:
    value = _QUOTES_RE.sub('', value.strip())

    match = _EXT_VALUE_RE.match(value)
    if match is None:
        return unquote(value, errors='replace')

    charset, encoded = match.groups()
    try:
        encoding = codecs.lookup(charset or 'utf-8').name
    except LookupError:
        encoding = 'utf-8'
    return unquote(encoded, encoding=encoding, errors='replace')


def filename_from_headers(url: str, headers: Headers | None = None) -> str:
    """Derive a download filename

    Preference order:
        1. `filename*` parameter of Content-Disposition (RFC 5987, percent-decoded)
        2. bare `filename` parameter of Content-Disposition
        3. last segment of the URL path (percent-decoded)
        4. 'downloaded-file'

    Args:
        url (str):
            The (normalized) URL the response came from.
        headers (Headers | None):
            Response headers. Pass a case-insensitive mapping (e.g. httpx.Headers)
            or a dict with lowercase keys.

    Returns:
        str: filename, never empty.

    Example:
        >>> filename_from_headers('https://github.com/a/b/archive/main.zip', {})
        'main.zip'
        >>> filename_from_headers('https://github.com/', {'content-disposition': 'attachment; filename="b-main.zip"'})
        'b-main.zip'
    """
    disposition = (headers or {}).get('content-disposition')
    if disposition:
        match = _FILENAME_STAR_RE.search(disposition)
        if match:
            name = _decode_ext_value(match.group(1))
            if name:
                return name
        match = _FILENAME_RE.search(disposition)
        if match:
            return match.group(2)

    name = unquote(urlsplit(url).path.rsplit('/', 1)[-1])
    return name or DEFAULT_FILENAME


def content_disposition(filename: str) -> str:
    """Build an 'attachment' Content-Disposition header value

    Example:
        >>> content_disposition('my file.zip')
        "attachment; filename*=UTF-8''my%20file.zip"
    """
    return f"attachment; filename*=UTF-8''{quote(filename, safe=_ATTR_CHAR_SAFE)}"
