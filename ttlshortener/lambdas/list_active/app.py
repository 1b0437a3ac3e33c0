import logging
from typing import Any

from ttlshortener.exceptions import ConfigurationError
from ttlshortener.services import build_service
from ttlshortener.utils import load_config, get_short_url, guarantee_500_response
from ttlshortener.lambdas.responses import response_200, response_500


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Handle API Gateway requests listing all live links

    HTTP responses:
        200: links which aren't expired, soonest expiry first
            count: number of links
            links: [{identifier, short_url, target, expires_at, created_at, updated_at}, ...]
        500: Internal server error
    """
    try:
        app_config = load_config('list_active')
    except (FileNotFoundError, ConfigurationError):
        logger.exception('Failed to load AppConfig for list active function. Responding with 500.')
        return response_500()

    service = build_service(app_config)
    links = [{**mapping.to_dict(), 'short_url': get_short_url(mapping.identifier, event)} for mapping in service.list_active()]

    logger.debug('Listing %s active links.', len(links))
    return response_200({'count': len(links), 'links': links})
