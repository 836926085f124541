import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing short links.

    Two indexes are kept:
        c:<code>      -> target URL
        u:<url hash>  -> code already issued for that URL

    An optional prefix can be provided to namespace all generated keys,
    e.g. "gitmirror:prod" or "gitmirror:dev".
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_target_key(self, code: str) -> str:
        return f'c:{code}'

    @prefix_key
    def link_code_key(self, url_hash: str) -> str:
        return f'u:{url_hash}'
