import json
import logging
from typing import Any

from ttlshortener.dao.exceptions import DAOError
from ttlshortener.exceptions import ShortenerError
from ttlshortener.services import build_service
from ttlshortener.utils import load_config
from ttlshortener.lambdas.cleanup_expired.constants import SUCCESS, ERROR


logger = logging.getLogger(__name__)


def response_success(*, removed: int) -> str:
    return json.dumps(
        {
            'status': SUCCESS,
            'removed': int(removed),
            'message': f'Successfully removed {removed} expired links',
        }
    )


def response_error(*, error: DAOError | ShortenerError | Exception) -> str:
    return json.dumps(
        {
            'status': ERROR,
            'message': 'Failed to remove expired links',
            'reason': str(error),
            'error': error.__class__.__name__,
        }
    )


def lambda_handler(event: dict, context: Any) -> str:
    """Sweep expired links on an EventBridge schedule

    This Lambda handler follows this procedure:
    - Step 1: Load config and build the shortening service
    - Step 2: Delete every link expired by now
    - Step 3: Respond with success or error

    Diagnostic responses:
        success:
            status: success
            removed: <count>
            message: Successfully removed <count> expired links
        error:
            status: error
            message: Failed to remove expired links
            reason: <reason>
            error: <error class name> (e.g. DataStoreError, BadConfigurationError)

    Args:
        event (dict):
            EventBridge event payload.
        context (LambdaContext):
            AWS Lambda context object containing runtime information.

    Returns:
        str: JSON encoded diagnostic response.

    Example:
        >>> response = json.loads(lambda_handler({}, None))
        >>> response['status']
        'success'
        >>> response['removed']
        12
    """
    try:
        app_config = load_config('cleanup_expired')
        removed = build_service(app_config).cleanup()
    except (DAOError, ShortenerError) as error:
        logger.exception(
            'Failed to remove expired links.',
            extra={'event': ERROR, 'reason': str(error), 'error': error.__class__.__name__},
        )
        return response_error(error=error)
    else:
        logger.info('Removed %s expired links.', removed, extra={'event': SUCCESS, 'removed': removed})
        return response_success(removed=removed)
