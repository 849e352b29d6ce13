"""
Outbound messaging core - Module Exports

Pure pieces only (no transport imports). Import the senders directly:

    from outbound.client import OutboundClient
    from outbound.retry import RetryPolicy, send_with_retry
    from outbound.batch import send_batch
"""

from .builder import CUSTOMER_SERVICE_WINDOW, build_request, is_window_open
from .classifier import classify, describe, is_retryable
from .errors import (
    InvalidFormatError,
    InvalidPayloadError,
    MissingCredentialError,
    MissingTimezoneError,
    OutboundInputError,
    WindowClosedError,
    WrongIdentifierTypeError,
)
from .types import (
    ErrorClassification,
    Failure,
    FreeForm,
    OutboundMessage,
    OutboundRequest,
    SendCancelled,
    SendContext,
    SendErr,
    SendOk,
    SendOutcome,
    SendResult,
    Success,
    Template,
)
from .validation import (
    RecipientAddress,
    SenderIdentifier,
    validate_recipient,
    validate_sender_identifier,
)

__all__ = [
    # Validation
    "validate_recipient",
    "validate_sender_identifier",
    "RecipientAddress",
    "SenderIdentifier",
    # Data model
    "FreeForm",
    "Template",
    "OutboundMessage",
    "SendContext",
    "OutboundRequest",
    "SendOk",
    "SendErr",
    "SendCancelled",
    "SendOutcome",
    "SendResult",
    "Success",
    "Failure",
    "ErrorClassification",
    # Builder
    "build_request",
    "is_window_open",
    "CUSTOMER_SERVICE_WINDOW",
    # Classifier
    "classify",
    "is_retryable",
    "describe",
    # Errors
    "OutboundInputError",
    "InvalidFormatError",
    "WrongIdentifierTypeError",
    "WindowClosedError",
    "MissingTimezoneError",
    "MissingCredentialError",
    "InvalidPayloadError",
]
