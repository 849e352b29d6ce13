"""
Graph API Error Classifier

Single source of truth for what an (error_code, error_subcode) pair means.
The retry controller only ever asks is_retryable(); it never inspects codes.

ref: https://developers.facebook.com/docs/whatsapp/cloud-api/support/error-codes
"""

from typing import Dict, FrozenSet, Optional, Tuple

from .types import ErrorClassification


# Expired / invalidated session tokens. Refreshing the credential and
# retrying can succeed.
TOKEN_SUBCODES: FrozenSet[int] = frozenset({460, 463, 467})

# code -> classification, for codes whose subcode does not matter
_CODE_TABLE: Dict[int, ErrorClassification] = {
    100: ErrorClassification.DEVELOPER_FIXABLE,      # invalid parameter
    200: ErrorClassification.DEVELOPER_FIXABLE,      # permission missing
    131047: ErrorClassification.DEVELOPER_FIXABLE,   # re-engagement: send a template
    368: ErrorClassification.PLATFORM_ENFORCED,      # temporarily blocked for policy
    4: ErrorClassification.RATE_LIMITED,             # app-level throttling
    17: ErrorClassification.RATE_LIMITED,            # user-level throttling
    32: ErrorClassification.RATE_LIMITED,            # page-level throttling
}

_HINTS: Dict[Tuple[int, Optional[int]], str] = {
    (190, 460): "Password changed; refresh the access token.",
    (190, 463): "Access token expired; refresh it and retry.",
    (190, 467): "Access token invalidated; refresh it and retry.",
    (190, None): "Malformed or invalid access token; check the Authorization header.",
    (100, None): "Invalid parameter; check the request body against the API reference.",
    (200, None): "Permission missing; grant whatsapp_business_messaging to the token.",
    (131047, None): "More than 24 hours since the customer last replied; send a template.",
    (368, None): "Sender temporarily blocked for policy violations.",
    (4, None): "Application request limit reached; back off.",
    (17, None): "User request limit reached; back off.",
    (32, None): "Page request limit reached; back off.",
}


def classify(
    error_code: Optional[int],
    error_subcode: Optional[int] = None,
) -> ErrorClassification:
    """
    Map a Graph API error to a classification.

    Unknown codes are DEVELOPER_FIXABLE so nothing unknown is auto-retried.
    """
    if error_code == 190:
        if error_subcode in TOKEN_SUBCODES:
            return ErrorClassification.TRANSIENT
        return ErrorClassification.DEVELOPER_FIXABLE

    if error_code is None:
        return ErrorClassification.DEVELOPER_FIXABLE

    return _CODE_TABLE.get(error_code, ErrorClassification.DEVELOPER_FIXABLE)


def is_retryable(classification: ErrorClassification) -> bool:
    """Only rate limits and transient failures are worth another attempt."""
    return classification in (
        ErrorClassification.RATE_LIMITED,
        ErrorClassification.TRANSIENT,
    )


def describe(error_code: Optional[int], error_subcode: Optional[int] = None) -> str:
    """Human-readable remediation hint for an error."""
    hint = _HINTS.get((error_code, error_subcode))
    if hint is None:
        hint = _HINTS.get((error_code, None))
    if hint is None:
        return f"Unrecognized error code {error_code}; inspect the message and fix the request."
    return hint
