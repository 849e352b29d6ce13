"""
Recipient and Sender Validation

PURE FUNCTIONS - NO I/O, NO SIDE EFFECTS

- Recipient: E.164 ("+" followed by 7-15 digits, no separators)
- Sender: 15-digit phone number ID from WhatsApp Manager

The 16-digit WhatsApp Business Account ID looks similar and is the most
common wrong value for the sender. It is rejected, never substituted.
"""

import re
from datetime import datetime
from typing import NewType

from .errors import InvalidFormatError, MissingTimezoneError, WrongIdentifierTypeError


RecipientAddress = NewType("RecipientAddress", str)
SenderIdentifier = NewType("SenderIdentifier", str)

E164_PATTERN = re.compile(r"^\+[0-9]{7,15}$")
SENDER_IDENTIFIER_LENGTH = 15


def validate_recipient(raw: str) -> RecipientAddress:
    """
    Validate an E.164 recipient phone number.

    The input is returned unchanged, so validating an already valid
    address is a no-op.

    Raises:
        InvalidFormatError: Not "+" followed by 7-15 digits
    """
    if not isinstance(raw, str) or not E164_PATTERN.fullmatch(raw):
        raise InvalidFormatError(
            f"Recipient {raw!r} is not E.164 (expected '+' and 7-15 digits, no separators)"
        )
    return RecipientAddress(raw)


def validate_sender_identifier(raw: str) -> SenderIdentifier:
    """
    Validate a phone number ID used as the sender.

    Raises:
        WrongIdentifierTypeError: Length is not 15 or non-digits present
    """
    if not isinstance(raw, str):
        raise WrongIdentifierTypeError(f"Sender identifier must be a string, got {type(raw).__name__}")

    if len(raw) != SENDER_IDENTIFIER_LENGTH or not raw.isascii() or not raw.isdigit():
        hint = ""
        if len(raw) == 16 and raw.isdigit():
            hint = " (looks like a WhatsApp Business Account ID; use the phone number ID)"
        raise WrongIdentifierTypeError(
            f"Sender identifier {raw!r} is not a 15-digit phone number ID{hint}"
        )
    return SenderIdentifier(raw)


def require_aware(ts: datetime) -> datetime:
    """
    Reject naive datetimes; comparing them with aware ones is undefined.

    Raises:
        MissingTimezoneError: ts has no usable tzinfo
    """
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise MissingTimezoneError(
            f"Timestamp {ts.isoformat()} has no timezone; pass an aware datetime"
        )
    return ts
