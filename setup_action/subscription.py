"""
Subscription check run before anything is installed.
"""

import logging
import sys

import requests

from .config import Settings

logger = logging.getLogger(__name__)


def validate_subscription(settings: Settings) -> None:
    """
    Check that the repository has a valid subscription.

    An error response from the API ends the process with exit code 1. A
    timeout or an unreachable API is logged and ignored.

    Args:
        settings: Runtime settings carrying the repository and timeout
    """
    try:
        response = requests.get(settings.subscription_url, timeout=settings.subscription_timeout)
        response.raise_for_status()
    except requests.HTTPError:
        logger.error("Subscription is not valid. Reach out to support@stepsecurity.io")
        sys.exit(1)
    except requests.RequestException:
        logger.info("Timeout or API not reachable. Continuing to next step.")
