from gitmirror.dao.base.short_link_base_dao import ShortLinkBaseDAO
from gitmirror.dao.base.response_cache_base_dao import ResponseCacheBaseDAO


__all__ = [
    'ShortLinkBaseDAO',
    'ResponseCacheBaseDAO',
]
