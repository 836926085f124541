from gitmirror.services.short_link_registry import ShortLinkRegistry
from gitmirror.services.metadata_resolver import MetadataResolver
from gitmirror.services.cache_writer import CacheWriter
from gitmirror.services.proxy_engine import ProxyCacheEngine


__all__ = [
    'ShortLinkRegistry',
    'MetadataResolver',
    'CacheWriter',
    'ProxyCacheEngine',
]
