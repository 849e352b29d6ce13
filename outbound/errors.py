"""
Outbound Input Errors

FAIL-FAST, LOCAL, NEVER RETRIED.

Raised before any network call when caller input cannot produce a valid
request. Remote API failures are NOT exceptions: they travel back as
typed SendErr / Failure values (see outbound.types).
"""


class OutboundInputError(Exception):
    """Caller input rejected before sending."""
    pass


class InvalidFormatError(OutboundInputError):
    """Recipient is not an E.164 phone number."""
    pass


class WrongIdentifierTypeError(OutboundInputError):
    """Sender identifier is not a 15-digit phone number ID."""
    pass


class WindowClosedError(OutboundInputError):
    """Free-form message requested outside the 24h customer service window."""
    pass


class MissingTimezoneError(OutboundInputError):
    """Last inbound timestamp is a naive datetime."""
    pass


class MissingCredentialError(OutboundInputError):
    """Access token is missing or empty."""
    pass


class InvalidPayloadError(OutboundInputError):
    """Message content is missing a required field."""
    pass
