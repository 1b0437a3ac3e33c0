"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to
access configuration data stored in **AWS AppConfig**. Each environment
(`APP_ENV`) has a dedicated AppConfig *Environment* within the shared
AppConfig *Application* identified by `APP_NAME`. Configuration data is
stored as a JSON document under a configuration profile (typically
`backend-config`) and deployed to the corresponding environment.

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "shortener": {
            "default_ttl_days": 30,
            "max_allocation_attempts": 1000
        },
        "configs": {
            "shorten_url": {
                "redis": { ... }
            },
            "redirect_url": {
                "redis": { ... }
            }
        }
    }

Each Lambda loads its own section (e.g., `"shorten_url"`) from this
AppConfig document, plus the shared `"shortener"` tunables.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    project_root() -> Path
        Return the absolute path to the project root directory, using
        `PROJECT_ROOT` when available.

    load_config(lambda_name: str) -> dict
        Load configuration for a given Lambda from AWS AppConfig and
        return it as a Python dictionary. In SAM, load configuration
        from a local AppConfig agent.

Classes:
    ShortenerSettings
        Typed view of the `"shortener"` section with defaults.

Example:
    Typical usage inside a Lambda handler:

        >>> from ttlshortener.utils.config import load_config
        >>> config = load_config('shorten_url')
        >>> print(config['redis']['host'])
        redis-15501.host.docker.internal
        >>> ShortenerSettings.from_config(config).default_ttl_days
        30
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from collections.abc import Callable

import boto3

from ttlshortener.constants import ENV, Defaults, Identifier
from ttlshortener.exceptions import BadConfigurationError
from ttlshortener.utils.helpers import require_environment
from ttlshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

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


def project_root() -> Path:
    """Return the absolute path to the project root directory

    Finds the project root via the CloudFormation environment variable PROJECT_ROOT.
    Falls back to the current file.
    """
    return Path(os.environ.get(ENV.App.PROJECT_ROOT, os.path.dirname(__file__)))


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'ttlshortener'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'ttlshortener:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _extract_lambda_config(document: dict[str, Any], lambda_name: str) -> dict[str, Any]:
    """Cut the active backend section of one Lambda (and the shared tunables) out of an AppConfig document"""
    try:
        backend = document['active_backend']
        data = {backend: document['configs'][lambda_name][backend]}
    except KeyError as e:
        raise BadConfigurationError(f'AppConfig document has no {e} section for lambda {lambda_name!r}.') from e
    data['shortener'] = document.get('shortener', {})
    return data


def _validate_appconfig_url(url: str | None) -> str:
    if not url:
        return ''
    components = urllib.parse.urlparse(url)
    if components.scheme not in {'http', 'https'}:
        raise ValueError(f'Bad scheme {url}')
    if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal'}:
        raise ValueError(f'Bad host {url}')
    if components.port not in {2772, None}:
        raise ValueError(f'Bad port {url}')
    return url


def _sam_load_local_appconfig(func: Callable[[str], dict]) -> Callable[[str], dict]:
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     – Base URL of the local AppConfig Agent (e.g., http://host.docker.internal:2772).
        APPCONFIG_PROFILE_NAME  – Optional profile name (default: "backend-config").
    """

    @functools.wraps(func)
    def wrapper(lambda_name: str, *args, **kwargs) -> dict:
        agent_url = _validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(lambda_name, *args, **kwargs)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)

        data = _extract_lambda_config(document, lambda_name)
        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
        return data

    return wrapper


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> dict:
    """Load configuration for a given Lambda from AWS AppConfig

    Fetches the AppConfig JSON once and returns the section relevant
    to the requested Lambda function (e.g., 'shorten_url', 'redirect_url').

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "shorten_url" or "redirect_url").

    Returns:
        dict: {<active backend>: {...}, 'shortener': {...}}

    Raises:
        MissingEnvironmentVariableError:
            If any of the AppConfig identifiers is not set.
        BadConfigurationError:
            If the document has no section for this Lambda's active backend.

    Example:
        >>> app_config = load_config('shorten_url')
        >>> app_config['redis']['host']
        'redis-15501.host.docker.internal'
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

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
    document = json.loads(content.decode('utf-8'))

    data = _extract_lambda_config(document, lambda_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return data


@dataclass(frozen=True)
class ShortenerSettings:
    """Service tunables from the `"shortener"` AppConfig section

    Identifiers are always `Identifier.LENGTH` characters long; a section
    trying to change that is rejected rather than ignored.

    Attributes:
        default_ttl_days (int):
            Lifetime of links created without an explicit TTL.
        max_allocation_attempts (int):
            Retry ceiling for finding a free identifier.
    """

    default_ttl_days: int = Defaults.TTL_DAYS
    max_allocation_attempts: int = Defaults.MAX_ALLOCATION_ATTEMPTS

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> 'ShortenerSettings':
        """Build settings from a loaded Lambda config, falling back to defaults

        Raises:
            BadConfigurationError: If a value is not an integer in its allowed range,
                or if `identifier_length` is set to anything but `Identifier.LENGTH`.
        """
        section = config.get('shortener') or {}
        identifier_length = section.get('identifier_length', Identifier.LENGTH)
        if type(identifier_length) is not int or identifier_length != Identifier.LENGTH:
            raise BadConfigurationError(
                f"'identifier_length' is fixed at {Identifier.LENGTH} (given value: {identifier_length!r})."
            )

        settings = cls(
            default_ttl_days=section.get('default_ttl_days', Defaults.TTL_DAYS),
            max_allocation_attempts=section.get('max_allocation_attempts', Defaults.MAX_ALLOCATION_ATTEMPTS),
        )
        for name, minimum in (('default_ttl_days', 0), ('max_allocation_attempts', 1)):
            value = getattr(settings, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
                raise BadConfigurationError(f"'{name}' must be an integer >= {minimum} (given value: {value!r}).")
        return settings
