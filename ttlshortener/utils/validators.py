"""Input validation for link creation

Functions:
    validate_target(target) -> str
        Ensure a target is an absolute http(s) URL, return it unchanged.
    validate_ttl_days(ttl_days) -> int
        Ensure a TTL in days is a non-negative integer.

Example:
    >>> validate_target('https://example.com/page?id=1')
    'https://example.com/page?id=1'
    >>> validate_target('not a url')
    Traceback (most recent call last):
        ...
    ttlshortener.exceptions.InvalidInputError: Invalid URL 'not a url': URL must use http or https scheme.
"""

from urllib.parse import urlparse

from ttlshortener.constants import Defaults
from ttlshortener.exceptions import InvalidInputError


ALLOWED_SCHEMES = frozenset({'http', 'https'})


def validate_target(target: object) -> str:
    if not isinstance(target, str) or not target:
        raise InvalidInputError('Target URL is required.')
    if len(target) > Defaults.MAX_URL_LENGTH:
        raise InvalidInputError(f'Target URL is too long (max {Defaults.MAX_URL_LENGTH} characters).')
    if any(char.isspace() for char in target):
        raise InvalidInputError(f'Invalid URL {target!r}: URL must not contain whitespace.')

    try:
        components = urlparse(target)
        # Accessing .port validates the port component
        components.port
    except ValueError as e:
        raise InvalidInputError(f'Invalid URL {target!r}: {e}.') from e

    if components.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidInputError(f'Invalid URL {target!r}: URL must use http or https scheme.')
    if not components.hostname:
        raise InvalidInputError(f'Invalid URL {target!r}: URL must have a host.')
    return target


def validate_ttl_days(ttl_days: object) -> int:
    if not isinstance(ttl_days, int) or isinstance(ttl_days, bool):
        raise InvalidInputError(f'TTL must be an integer number of days (given type: {type(ttl_days).__name__}).')
    if ttl_days < 0:
        raise InvalidInputError(f'TTL must not be negative (given value: {ttl_days}).')
    return ttl_days
