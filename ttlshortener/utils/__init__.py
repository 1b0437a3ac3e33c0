from ttlshortener.utils.config import app_env, app_name, project_root, app_prefix, load_config, ShortenerSettings
from ttlshortener.utils.helpers import base_url, get_short_url, require_environment, guarantee_500_response
from ttlshortener.utils.shortener import IdentifierGenerator, generate_identifier
from ttlshortener.utils.expiry import ensure_utc, is_expired, expiry_from_ttl
from ttlshortener.utils.logging import initialize_logging


__all__ = [
    'IdentifierGenerator',
    'generate_identifier',
    'ensure_utc',
    'is_expired',
    'expiry_from_ttl',
    'app_env',
    'app_name',
    'app_prefix',
    'project_root',
    'load_config',
    'ShortenerSettings',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
