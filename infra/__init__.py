"""
Infrastructure module exports.

Configuration and bootstrap for the outbound client.
"""

from .config import OutboundConfig, TransportType, get_config
from .bootstrap import bootstrap_outbound

__all__ = [
    "OutboundConfig",
    "TransportType",
    "get_config",
    "bootstrap_outbound",
]
