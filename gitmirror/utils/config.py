"""Utility functions for application configuration management.

The gateway is configured through one immutable `GatewaySettings` value that
is built at start-up and passed into every component. Settings come from, in
order of precedence:

    1. the `gateway` section of an **AWS AppConfig** JSON document (when the
       APPCONFIG_* environment variables are set),
    2. environment variables for the Redis connection (REDIS_HOST, ...),
    3. built-in defaults (see gitmirror.utils.constants).

The AppConfig document follows this structure:

    {
        "build": "2026-01-02.1",
        "configs": {
            "gateway": {
                "allowed_hosts": ["github.com", "raw.githubusercontent.com"],
                "cache_ttl": 31536000,
                "probe_timeout": 5,
                "redis": {"host": "redis.internal", "port": 6379, "db": 0}
            }
        }
    }

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    load_config(section: str) -> dict
        Load a section of the AppConfig document.

    load_settings() -> GatewaySettings
        Build the gateway settings, using AppConfig when it is configured.

Example:
        >>> from gitmirror.utils.config import load_settings
        >>> settings = load_settings()
        >>> settings.cache_ttl
        31536000
"""

import os
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from gitmirror.types import AppConfig, RedisConfiguration
from gitmirror.exceptions import AppConfigError, BadConfigurationError, MissingEnvironmentVariableError
from gitmirror.utils.helpers import require_environment
from gitmirror.utils.constants import (
    ENV,
    TTL,
    CORS_HEADERS,
    DEFAULT_ALLOWED_HOSTS,
    FORWARDED_REQUEST_HEADERS,
    STRIPPED_RESPONSE_HEADERS,
    UPSTREAM_USER_AGENT,
    POWERED_BY,
    PROBE_TIMEOUT_SECONDS,
    SHORTCODE_LENGTH,
    SHORTCODE_MAX_ATTEMPTS,
    STREAM_CHUNK_SIZE,
    CACHE_BUFFER_CHUNKS,
)


logger = logging.getLogger(__name__)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Returns:
        str:
            Value of `APP_ENV` environment variable, `'local'` by default.

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME'

    Returns:
        str:
            Value of `APP_NAME` environment variable.
            None if variable is not set.
    """
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'gitmirror'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'gitmirror:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


@dataclass(frozen=True)
class GatewaySettings:
    """Immutable gateway configuration shared by all components.

    Attributes:
        allowed_hosts (frozenset[str]):
            Hostnames that may be proxied, shortened or probed.
        cache_ttl (int):
            Freshness lifetime of cached downloads in seconds.
        forwarded_headers (tuple[str, ...]):
            Request headers (lowercase) forwarded upstream by the proxy.
        stripped_headers (tuple[str, ...]):
            Upstream response headers (lowercase) never passed to clients.
        upstream_user_agent (str):
            User-Agent sent to upstream hosts.
        powered_by (str):
            Value of the product-identifying X-Powered-By header.
        cors_headers (Mapping[str, str]):
            CORS headers applied to API and proxy responses.
        probe_timeout (float):
            Deadline in seconds for each metadata probe request.
        shortcode_length (int):
            Length of generated short codes.
        shortcode_max_attempts (int):
            Candidates drawn before a short code is accepted regardless of collisions.
        chunk_size (int):
            Size in bytes of streamed body chunks.
        cache_buffer_chunks (int):
            Chunks buffered for the cache copy before the copy is abandoned.
        redis (Mapping[str, Any]):
            Redis connection parameters (host, port, db, username, password).
        prefix (str | None):
            Namespace prefix for Redis keys, e.g. 'gitmirror:prod'.
    """

    allowed_hosts: frozenset[str] = DEFAULT_ALLOWED_HOSTS
    cache_ttl: int = TTL.ONE_YEAR
    forwarded_headers: tuple[str, ...] = FORWARDED_REQUEST_HEADERS
    stripped_headers: tuple[str, ...] = STRIPPED_RESPONSE_HEADERS
    upstream_user_agent: str = UPSTREAM_USER_AGENT
    powered_by: str = POWERED_BY
    cors_headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(CORS_HEADERS)))
    probe_timeout: float = PROBE_TIMEOUT_SECONDS
    shortcode_length: int = SHORTCODE_LENGTH
    shortcode_max_attempts: int = SHORTCODE_MAX_ATTEMPTS
    chunk_size: int = STREAM_CHUNK_SIZE
    cache_buffer_chunks: int = CACHE_BUFFER_CHUNKS
    redis: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    prefix: str | None = None

    def __post_init__(self):
        if not self.allowed_hosts:
            raise BadConfigurationError('At least one allowed host must be configured.')
        for name in ('cache_ttl', 'shortcode_length', 'shortcode_max_attempts', 'chunk_size', 'cache_buffer_chunks'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise BadConfigurationError(f'{name} must be a positive integer (given value: {value!r}).')
        if not isinstance(self.probe_timeout, int | float) or self.probe_timeout <= 0:
            raise BadConfigurationError(f'probe_timeout must be a positive number (given value: {self.probe_timeout!r}).')

    def redis_kwargs(self) -> RedisConfiguration:
        """Return Redis parameters as RedisClientMixin keyword arguments (redis_host=..., ...)"""
        return {f'redis_{k}': v for k, v in self.redis.items() if v is not None}

    @classmethod
    def from_document(
        cls,
        document: AppConfig | None = None,
        environ: Mapping[str, str] | None = None,
        prefix: str | None = None,
    ) -> 'GatewaySettings':
        """Build settings from an AppConfig section, environment variables and defaults

        Args:
            document (AppConfig | None):
                The `gateway` section of the AppConfig document (may be empty).
            environ (Mapping[str, str] | None):
                Environment to read Redis parameters from. Defaults to os.environ.
            prefix (str | None):
                Namespace prefix for Redis keys.

        Raises:
            BadConfigurationError:
                If a value has the wrong type or is out of range.
        """
        document = dict(document or {})
        environ = os.environ if environ is None else environ

        redis_config = {
            'host': environ.get(ENV.Redis.HOST, 'localhost'),
            'port': environ.get(ENV.Redis.PORT, 6379),
            'db': environ.get(ENV.Redis.DB, 0),
            'username': environ.get(ENV.Redis.USERNAME),
            'password': environ.get(ENV.Redis.PASSWORD),
        }
        redis_config.update(document.pop('redis', None) or {})
        try:
            redis_config['port'] = int(redis_config['port'])
            redis_config['db'] = int(redis_config['db'])
        except (TypeError, ValueError) as e:
            raise BadConfigurationError(f"Invalid Redis port/db values: port={redis_config['port']!r} db={redis_config['db']!r}") from e

        kwargs: dict[str, Any] = {'redis': MappingProxyType(redis_config), 'prefix': prefix}
        try:
            if 'allowed_hosts' in document:
                kwargs['allowed_hosts'] = frozenset(host.lower() for host in document.pop('allowed_hosts'))
            for name in ('forwarded_headers', 'stripped_headers'):
                if name in document:
                    kwargs[name] = tuple(header.lower() for header in document.pop(name))
            if 'cors_headers' in document:
                kwargs['cors_headers'] = MappingProxyType(dict(document.pop('cors_headers')))
        except (TypeError, AttributeError) as e:
            raise BadConfigurationError(f'Malformed gateway configuration: {e}') from e

        known = set(cls.__dataclass_fields__)
        unknown = set(document) - known
        if unknown:
            raise BadConfigurationError(f'Unknown gateway configuration keys: {sorted(unknown)}')
        kwargs.update(document)

        return cls(**kwargs)


@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(section: str = 'gateway') -> AppConfig:
    """Load a configuration section from AWS AppConfig

    Fetches the AppConfig JSON once and returns the requested section of its
    `configs` object.

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        section (str):
            Name of the section (e.g., "gateway").

    Returns:
        dict: The section as a Python dictionary.

    Raises:
        MissingEnvironmentVariableError:
            If the AppConfig identifiers are not set.
        AppConfigError:
            If AppConfig can't be reached or returns a malformed document.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'section': section})

    try:
        appconfig = boto3.client('appconfigdata')

        # Start an AppConfig data session
        session_token = appconfig.start_configuration_session(
            ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
            EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
            ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
        )['InitialConfigurationToken']

        # Fetch the configuration
        response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
        content = response['Configuration'].read()
        config = json.loads(content.decode('utf-8'))
        data = config['configs'][section]
    except (BotoCoreError, ClientError) as e:
        raise AppConfigError(f'Failed to fetch AppConfig document: {e}') from e
    except (KeyError, TypeError, ValueError) as e:
        raise AppConfigError(f"Malformed AppConfig document (missing section '{section}'?)") from e

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'section': section, 'build': config.get('build')})
    return data


def load_settings() -> GatewaySettings:
    """Build GatewaySettings from AppConfig (when configured), environment and defaults"""
    try:
        document = load_config('gateway')
    except MissingEnvironmentVariableError:
        logger.info('AppConfig is not configured. Using environment variables and defaults.')
        document = {}

    return GatewaySettings.from_document(document, prefix=app_prefix())
