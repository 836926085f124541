"""Short link registry

Issues short codes for allow-listed URLs and resolves them back. Links are
deduplicated by the SHA-1 of the normalized target: shortening the same URL
twice returns the same code.

Example:
    >>> registry = ShortLinkRegistry(settings, ShortLinkRedisDAO(prefix='gitmirror:dev'))
    >>> link = await registry.create('github.com/a/b/archive/refs/heads/main.zip')
    >>> link.target
    'https://github.com/a/b/archive/refs/heads/main.zip'
    >>> (await registry.resolve(link.code)) == link
    True
"""

import logging

from gitmirror.models import ShortLinkModel
from gitmirror.dao.base import ShortLinkBaseDAO
from gitmirror.dao.exceptions import ShortLinkAlreadyExistsError
from gitmirror.utils.config import GatewaySettings
from gitmirror.utils.shortener import generate_shortcode, url_hash
from gitmirror.utils.urls import normalize_url


logger = logging.getLogger(__name__)


class ShortLinkRegistry:
    """Create and resolve short links on top of a ShortLinkBaseDAO

    Attributes:
        settings (GatewaySettings):
            Allow-list, short code length and attempt budget.
        dao (ShortLinkBaseDAO):
            Store holding the `c:` and `u:` indexes.
    """

    def __init__(self, settings: GatewaySettings, dao: ShortLinkBaseDAO):
        self.settings = settings
        self.dao = dao

    async def create(self, url: str) -> ShortLinkModel:
        """Return the short link for `url`, issuing a new code if needed

        Procedure:
            - Step 1: normalize the URL (raises InvalidURLError)
            - Step 2: return the code already indexed for the URL hash, if any
            - Step 3: draw candidates; all but the last are written put-if-absent,
                      the last one is written unconditionally
            - Step 4: index the hash; if another writer indexed it first, hand
                      out that writer's code

        Raises:
            InvalidURLError:
                If the URL is malformed or its host is not allowed.
            DataStoreError:
                If the store is unreachable.
        """
        # 1- Normalize
        target = normalize_url(url, self.settings.allowed_hosts)
        digest = url_hash(target)

        # 2- Deduplicate
        existing = await self.dao.find(digest)
        if existing is not None:
            logger.debug('URL already shortened.', extra={'code': existing, 'target': target})
            return ShortLinkModel(code=existing, target=target)

        # 3- Draw a free code
        attempts = self.settings.shortcode_max_attempts
        for attempt in range(1, attempts + 1):
            link = ShortLinkModel(code=generate_shortcode(self.settings.shortcode_length), target=target)
            force = attempt == attempts
            try:
                await self.dao.insert(link, force=force)
            except ShortLinkAlreadyExistsError:
                logger.debug('Short code collision.', extra={'code': link.code, 'attempt': attempt})
                continue
            if force:
                logger.warning('Short code written without collision check.', extra={'code': link.code, 'attempts': attempts})
            break

        # 4- Index the URL hash
        code = await self.dao.index(digest, link.code)
        if code != link.code:
            logger.info('Lost short link race, returning the indexed code.', extra={'code': code, 'orphan': link.code})

        return ShortLinkModel(code=code, target=target)

    async def resolve(self, code: str) -> ShortLinkModel:
        """Look up the target of a short code

        Raises:
            ShortLinkNotFoundError:
                If the code was never issued.
            DataStoreError:
                If the store is unreachable.
        """
        return await self.dao.get(code)
