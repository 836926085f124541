import functools
from collections.abc import Callable

from gitmirror.utils.shortener import url_hash


__all__ = ['CacheKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}'

    return wrapper


class CacheKeySchema:
    """Provide standardized Redis keys for cached responses.

    Keys always live under 'cache' (or 'cache:<prefix>') so they can't collide
    with the short link indexes kept in the same database. URLs are hashed to
    keep keys short and free of separators.

    NOTE: Yes, this class mirrors RedisKeySchema, but we don't want to spaghettify
    the caching layer with our short link datastore backend.
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = f'cache:{prefix}' if prefix is not None else 'cache'

    @staticmethod
    def _entry(method: str, url: str) -> str:
        return f'responses:{method.upper()}:{url_hash(url)}'

    @prefix_key
    def response_meta_key(self, method: str, url: str) -> str:
        return f'{self._entry(method, url)}:meta'

    @prefix_key
    def response_body_key(self, method: str, url: str) -> str:
        return f'{self._entry(method, url)}:body'

    @prefix_key
    def pending_body_key(self, method: str, url: str, token: str) -> str:
        return f'{self._entry(method, url)}:body:pending:{token}'
