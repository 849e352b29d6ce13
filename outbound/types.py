"""
Outbound Data Model

PURE DATA - NO I/O

Everything here is transient: built per call, frozen, never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Union

from .validation import (
    RecipientAddress,
    SenderIdentifier,
    require_aware,
    validate_recipient,
    validate_sender_identifier,
)


class ErrorClassification(str, Enum):
    """How a remote failure should be handled."""

    DEVELOPER_FIXABLE = "developer_fixable"
    PLATFORM_ENFORCED = "platform_enforced"
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"


# ============================================================================
# MESSAGE CONTENT
# ============================================================================

@dataclass(frozen=True)
class FreeForm:
    """Unstructured text, only allowed inside the 24h window."""

    body: str


@dataclass(frozen=True)
class Template:
    """Pre-approved template, allowed at any time."""

    name: str
    language: str
    parameters: Tuple[str, ...] = ()

    def __post_init__(self):
        # Accept lists from callers but keep the instance immutable
        object.__setattr__(self, "parameters", tuple(self.parameters))


OutboundMessage = Union[FreeForm, Template]


# ============================================================================
# SEND CONTEXT AND REQUEST
# ============================================================================

@dataclass(frozen=True)
class SendContext:
    """
    Who is messaged, from which number, and when they last wrote to us.

    Both identifiers are validated on construction, and a present
    last_inbound_at must be timezone-aware.
    """

    recipient_id: RecipientAddress
    sender_identifier: SenderIdentifier
    last_inbound_at: Optional[datetime] = None

    def __post_init__(self):
        validate_recipient(self.recipient_id)
        validate_sender_identifier(self.sender_identifier)
        if self.last_inbound_at is not None:
            require_aware(self.last_inbound_at)


MessageType = Literal["text", "template"]


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class OutboundRequest:
    """
    Fully built Cloud API request, ready for a transport.

    The payload is deep-frozen on construction (read-only mappings and
    tuples); body() returns a fresh JSON-ready copy.
    """

    sender_identifier: SenderIdentifier
    recipient: RecipientAddress
    message_type: MessageType
    payload: Mapping[str, Any] = field(hash=False)

    def __post_init__(self):
        object.__setattr__(self, "payload", _freeze(self.payload))

    def body(self) -> Dict[str, Any]:
        """Plain dict/list copy of the payload for JSON encoding."""
        return _thaw(self.payload)


# ============================================================================
# TRANSPORT OUTCOMES
# ============================================================================

@dataclass(frozen=True)
class SendOk:
    """Message accepted by the API."""

    message_id: str
    attempts: int = 1


@dataclass(frozen=True)
class SendErr:
    """Message rejected, or the request never completed."""

    http_status: Optional[int]  # None for network-level failures
    error_code: Optional[int]
    message: str
    classification: ErrorClassification
    error_subcode: Optional[int] = None
    retries_exhausted: bool = False
    attempts: int = 1


@dataclass(frozen=True)
class SendCancelled:
    """Caller cancelled before the send completed."""

    attempts: int = 0


SendOutcome = Union[SendOk, SendErr, SendCancelled]


# ============================================================================
# PER-MESSAGE RESULT
# ============================================================================

@dataclass(frozen=True)
class Success:
    message_id: str


@dataclass(frozen=True)
class Failure:
    message: str
    error_code: Optional[int] = None
    error_subcode: Optional[int] = None
    classification: Optional[ErrorClassification] = None
    retries_exhausted: bool = False
    cancelled: bool = False


@dataclass(frozen=True)
class SendResult:
    """Exactly one per attempted send, however many retries it took."""

    recipient: RecipientAddress
    outcome: Union[Success, Failure]

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Success)

    @classmethod
    def from_outcome(cls, recipient: RecipientAddress, outcome: SendOutcome) -> "SendResult":
        """Collapse a transport outcome into a caller-facing result."""
        if isinstance(outcome, SendOk):
            return cls(recipient=recipient, outcome=Success(message_id=outcome.message_id))

        if isinstance(outcome, SendCancelled):
            return cls(
                recipient=recipient,
                outcome=Failure(message="Send cancelled", cancelled=True),
            )

        return cls(
            recipient=recipient,
            outcome=Failure(
                message=outcome.message,
                error_code=outcome.error_code,
                error_subcode=outcome.error_subcode,
                classification=outcome.classification,
                retries_exhausted=outcome.retries_exhausted,
            ),
        )
