"""Short code generation utility

This module provides the helpers used by the short-link registry: random short
codes drawn from an alphabet without visually ambiguous glyphs, and the
content hash used to deduplicate links.

Functions:
    generate_shortcode(length=6, alphabet=SHORTCODE_ALPHABET):
        Draw a random short code suitable for use as a URL slug.
    url_hash(url):
        Lowercase hex SHA-1 digest of a (normalized) URL.

Example:
    >>> from gitmirror.utils import generate_shortcode, url_hash
    >>> generate_shortcode()
    'Kx7pQa'
    >>> len(url_hash('https://github.com/a/b'))
    40
"""

import hashlib
import secrets

from gitmirror.utils.constants import SHORTCODE_ALPHABET, SHORTCODE_LENGTH


def generate_shortcode(length: int = SHORTCODE_LENGTH, alphabet: str = SHORTCODE_ALPHABET) -> str:
    """Generate a random short code

    Each character is drawn independently and uniformly from `alphabet` using
    the `secrets` module, so codes are neither sequential nor predictable.

    Args:
        length (int, optional):
            Number of characters. Defaults to 6.

        alphabet (str, optional):
            Characters to draw from. Defaults to the 58-character alphabet
            without 0, O, I and l.

    Returns:
        str: A random short code.

    NOTE:
        - With 58^6 (~3.8e10) possible codes, collisions are rare but possible.
          Callers are expected to check occupancy (see ShortLinkRegistry).
    """
    if not isinstance(length, int):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')
    if not alphabet:
        raise ValueError('Alphabet must be a non-empty string.')

    return ''.join(secrets.choice(alphabet) for _ in range(length))


def url_hash(url: str) -> str:
    """Return the lowercase hex SHA-1 digest of a URL (UTF-8 encoded)."""
    return hashlib.sha1(url.encode('utf-8')).hexdigest()  # noqa: S324
