from gitmirror.dao.redis.redis_key_schema import RedisKeySchema
from gitmirror.dao.redis.mixins import RedisClientMixin
from gitmirror.dao.redis.short_link_redis_dao import ShortLinkRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortLinkRedisDAO',
]
