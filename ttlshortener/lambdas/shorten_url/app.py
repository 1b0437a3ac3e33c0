import json
import logging
from typing import Any

from ttlshortener.exceptions import ConfigurationError, InvalidInputError
from ttlshortener.services import build_service
from ttlshortener.utils import load_config, get_short_url, guarantee_500_response
from ttlshortener.lambdas.responses import response_200, response_400, response_500
from ttlshortener.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    MISSING_TARGET_URL,
    INVALID_INPUT,
    LINK_CREATED,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Extract target URL (and optional TTL) from request body
    - Step 2: Create (or reuse) the short link via ShorteningService
    - Step 3: Respond to user with 200 success

    HTTP responses:
        200: Successful URL shortening
            message: success message
            target_url: original url (provided in request)
            short_url: short url of the link
            identifier: identifier of the link
            expires_at: ISO-8601 expiry of the link
        400: Bad client request
            message: cause of bad request (invalid JSON, missing or invalid target_url, invalid ttl_days)
        500: Internal server error
            message: indicate the server experienced an internal error

    Args:
        event (Dict[str, Any]):
            API Gateway event payload in Lambda Proxy format.
        context (Any):
            AWS Lambda context object containing runtime information.

    Returns:
        Dict[str, Any]:
            JSON-serializable response following API Gateway Lambda Proxy
            output format. Includes status code, headers, and response body.

    Example:
        >>> event = {'body': '{"target_url": "https://example.com", "ttl_days": 7}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])['message']
        Successfully shortened https://example.com to http://localhost:3000/aB3xY9
    """
    # 0- Get application's config
    try:
        app_config = load_config('shorten_url')
    except (FileNotFoundError, ConfigurationError):
        logger.exception('Failed to load AppConfig for shorten URL function. Responding with 500.')
        return response_500()

    # 1- Extract target URL and TTL from request body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)
    if not isinstance(request_body, dict):
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)

    target_url = request_body.get('target_url')
    if not target_url:
        logger.info("Missing 'target_url' in body. Responding with 400.", extra={'event': MISSING_TARGET_URL})
        return response_400(message="missing 'target_url' in JSON body", error_code=MISSING_TARGET_URL)
    ttl_days = request_body.get('ttl_days')
    bad_ttl = ttl_days is not None and (not isinstance(ttl_days, int) or isinstance(ttl_days, bool))
    if not isinstance(target_url, str) or bad_ttl:
        logger.info('Malformed link parameters. Responding with 400.', extra={'event': INVALID_INPUT})
        return response_400(message="'target_url' must be a string and 'ttl_days' an integer", error_code=INVALID_INPUT)

    # 2- Create (or reuse) the short link
    service = build_service(app_config)
    try:
        identifier = service.create(target_url, ttl_days=ttl_days)
    except InvalidInputError as e:
        logger.info('Invalid link parameters. Responding with 400.', extra={'event': INVALID_INPUT, 'reason': str(e)})
        return response_400(message=str(e), error_code=INVALID_INPUT)
    expires_at = service.info(identifier).expires_at.isoformat()
    short_url = get_short_url(identifier, event)

    # 3- Return successful response to user
    logger.info('Short link ready. Responding with 200.', extra={'identifier': identifier, 'event': LINK_CREATED})
    return response_200(
        {
            'message': f'Successfully shortened {target_url} to {short_url}',
            'target_url': target_url,
            'short_url': short_url,
            'identifier': identifier,
            'expires_at': expires_at,
        }
    )
