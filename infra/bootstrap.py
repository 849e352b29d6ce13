"""
Outbound client bootstrap.

Builds a transport and client from configuration. No process-wide
singleton: each call returns a new client owning a new transport.
"""

import logging
from typing import Optional

from outbound.client import OutboundClient

from .config import OutboundConfig, get_config

logger = logging.getLogger(__name__)


def bootstrap_outbound(config: Optional[OutboundConfig] = None) -> OutboundClient:
    """
    Create an OutboundClient from configuration.

    Args:
        config: Optional custom configuration (defaults to environment)

    Returns:
        OutboundClient; close it (or use it as a context manager) when done
    """
    config = config or get_config()

    client = OutboundClient(
        transport=config.create_transport(),
        sender_identifier=config.phone_number_id,
        retry_policy=config.create_retry_policy(),
        requests_per_second=config.requests_per_second,
    )

    logger.info(
        f"Outbound client ready (transport={config.transport}, api={config.api_version})",
        extra={
            "transport": config.transport,
            "api_version": config.api_version,
            "requests_per_second": config.requests_per_second,
            "max_attempts": config.max_attempts,
        },
    )
    return client
