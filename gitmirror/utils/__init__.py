from gitmirror.utils.config import GatewaySettings, app_env, app_name, app_prefix, load_config, load_settings
from gitmirror.utils.helpers import base_url, get_short_url, require_environment, guarantee_500_response
from gitmirror.utils.shortener import generate_shortcode, url_hash
from gitmirror.utils.urls import normalize_url, target_from_path
from gitmirror.utils.filenames import filename_from_headers, content_disposition
from gitmirror.utils.classify import classify_target
from gitmirror.utils.logging import initialize_logging


__all__ = [
    'GatewaySettings',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'load_settings',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'generate_shortcode',
    'url_hash',
    'normalize_url',
    'target_from_path',
    'filename_from_headers',
    'content_disposition',
    'classify_target',
    'initialize_logging',
]
