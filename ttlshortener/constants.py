import string
from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Extra lifetime of a stored record past its expiry, backstop for missed sweeps
    RETENTION_GRACE = 604_800  # 60 * 60 * 24 * 7


class Identifier:
    """Short identifier format."""

    ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
    LENGTH = 6


class Defaults:
    """Service tunables used when AppConfig doesn't override them."""

    TTL_DAYS = 30
    MAX_ALLOCATION_ATTEMPTS = 1_000
    MAX_URL_LENGTH = 2_048


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        PROJECT_ROOT = 'PROJECT_ROOT'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
