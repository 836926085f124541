from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Freshness lifetime of cached downloads (1 year in seconds)
    ONE_YEAR = 31_536_000  # 60 * 60 * 24 * 365
    # Lifetime of a partially written cache body before Redis drops it
    PENDING_BODY = 15 * 60


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'

    class Server(StrEnum):
        HOST = 'GITMIRROR_HOST'
        PORT = 'GITMIRROR_PORT'

    class Redis(StrEnum):
        HOST = 'REDIS_HOST'
        PORT = 'REDIS_PORT'
        DB = 'REDIS_DB'
        USERNAME = 'REDIS_USERNAME'
        PASSWORD = 'REDIS_PASSWORD'  # noqa: S105

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'


class CacheStatus(StrEnum):
    """Values of the cache status marker header."""

    HIT = 'HIT'
    MISS = 'MISS'
    BYPASS = 'BYPASS'


# Hosts the gateway is allowed to proxy, shorten and probe
DEFAULT_ALLOWED_HOSTS = frozenset(
    {
        'github.com',
        'raw.githubusercontent.com',
        'objects.githubusercontent.com',
        'releases.githubusercontent.com',
        'gist.githubusercontent.com',
    }
)

# Short codes: 6 characters from a 58-character alphabet without 0, O, I and l
SHORTCODE_ALPHABET = 'abcdefghijkmnopqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ123456789'
SHORTCODE_LENGTH = 6
SHORTCODE_MAX_ATTEMPTS = 5

# Metadata probe deadline in seconds
PROBE_TIMEOUT_SECONDS = 5.0

# Redis socket connect/read timeout in seconds
REDIS_SOCKET_TIMEOUT_SECONDS = 2.0

# Proxy header handling
FORWARDED_REQUEST_HEADERS = ('range', 'user-agent', 'accept', 'accept-encoding')
STRIPPED_RESPONSE_HEADERS = ('link', 'strict-transport-security')
HOP_BY_HOP_HEADERS = (
    'connection',
    'keep-alive',
    'proxy-authenticate',
    'proxy-authorization',
    'te',
    'trailer',
    'transfer-encoding',
    'upgrade',
)
UPSTREAM_USER_AGENT = 'Mozilla/5.0 (GitMirror)'
POWERED_BY = 'GitMirror-Pro'

CACHE_STATUS_HEADER = 'X-Cache-Status'
POWERED_BY_HEADER = 'X-Powered-By'

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, HEAD, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type, Range',
}

# Streaming
STREAM_CHUNK_SIZE = 64 * 1024
CACHE_BUFFER_CHUNKS = 64

# Fallback filename when neither headers nor URL path provide one
DEFAULT_FILENAME = 'downloaded-file'

# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
