"""WhatsApp Transport Layer - Module Exports"""

from .base import MessageTransport
from .permissions import (
    REQUIRED_SCOPES,
    ScopeCheck,
    TokenRedactingFilter,
    TokenScopeCheckError,
    check_token_scopes,
    missing_scopes,
)
from .schemas import (
    ContactReceipt,
    DebugTokenResponse,
    GraphError,
    GraphErrorEnvelope,
    MessageReceipt,
    WhatsAppMessageResponse,
)
from .sender import (
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    CloudAPITransport,
)
from .stub import StubTransport

__all__ = [
    # Interface
    "MessageTransport",
    # Implementations
    "CloudAPITransport",
    "StubTransport",
    "DEFAULT_API_VERSION",
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    # Schemas
    "WhatsAppMessageResponse",
    "ContactReceipt",
    "MessageReceipt",
    "GraphError",
    "GraphErrorEnvelope",
    "DebugTokenResponse",
    # Permissions
    "check_token_scopes",
    "missing_scopes",
    "ScopeCheck",
    "TokenScopeCheckError",
    "TokenRedactingFilter",
    "REQUIRED_SCOPES",
]
