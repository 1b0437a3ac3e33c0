import logging
from typing import Any

from ttlshortener.exceptions import ConfigurationError, NotFoundError
from ttlshortener.services import build_service
from ttlshortener.utils import load_config, get_short_url, guarantee_500_response
from ttlshortener.lambdas.responses import response_302, response_400, response_404, response_500
from ttlshortener.lambdas.redirect_url.constants import (
    MISSING_IDENTIFIER,
    LINK_NOT_FOUND,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract identifier from request path
    - Step 2: Resolve the identifier (expired links are reclaimed on read)
    - Step 3: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        400: Bad client request
            message: missing identifier in path parameters
        404: Not found
            message: link doesn't exist or has expired
        500: Internal server error
            message: server experienced an internal error

    Example:
        >>> event = {'pathParameters': {'identifier': 'aB3xY9'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 0- Get application's config
    try:
        app_config = load_config('redirect_url')
    except (FileNotFoundError, ConfigurationError):
        logger.exception('Failed to load AppConfig for redirect URL function. Responding with 500.')
        return response_500()

    # 1- Extract identifier from request's path
    identifier = (event.get('pathParameters') or {}).get('identifier')
    if identifier is None:
        logger.info(
            'Missing "identifier" in path. Responding with 400.',
            extra={'event': MISSING_IDENTIFIER},
        )
        return response_400(message="missing 'identifier' in path", error_code=MISSING_IDENTIFIER)
    logger.debug('Client requested short URL %s.', get_short_url(identifier, event))

    # 2- Resolve the identifier
    service = build_service(app_config)
    try:
        target_url = service.resolve(identifier)
    except NotFoundError:
        logger.info(
            'Link not found or expired. Responding with 404.',
            extra={'identifier': identifier, 'event': LINK_NOT_FOUND},
        )
        return response_404(message=f"short url {get_short_url(identifier, event)} doesn't exist", error_code=LINK_NOT_FOUND)

    # 3- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 302.',
        extra={'identifier': identifier, 'event': REDIRECT_SUCCESS},
    )
    return response_302(location=target_url)
