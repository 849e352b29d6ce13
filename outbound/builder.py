"""
Message Builder

Turns a validated SendContext plus message content into a complete
Cloud API request body.

Window rule:
- Free-form text is only allowed within 24h of the customer's last message
- Outside the window the caller must send a Template explicitly
- The builder never downgrades free-form to a template on its own
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from .errors import InvalidPayloadError, WindowClosedError
from .types import FreeForm, OutboundMessage, OutboundRequest, SendContext, Template
from .validation import require_aware


CUSTOMER_SERVICE_WINDOW = timedelta(hours=24)


def is_window_open(last_inbound_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    True when free-form messages are currently allowed.

    Raises:
        MissingTimezoneError: Either timestamp is naive
    """
    if last_inbound_at is None:
        return False

    require_aware(last_inbound_at)
    now = now or datetime.now(timezone.utc)
    require_aware(now)

    return now < last_inbound_at + CUSTOMER_SERVICE_WINDOW


def build_request(
    context: SendContext,
    content: OutboundMessage,
    now: Optional[datetime] = None,
) -> OutboundRequest:
    """
    Build a Cloud API /messages request.

    Args:
        context: Validated recipient, sender and last inbound timestamp
        content: FreeForm or Template
        now: Current time (defaults to UTC now)

    Returns:
        OutboundRequest with every mandatory field set

    Raises:
        MissingTimezoneError: now is naive
        WindowClosedError: FreeForm outside the 24h window
        InvalidPayloadError: Empty body / template name / language
    """
    payload: Dict[str, Any] = {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": context.recipient_id,
    }

    if isinstance(content, FreeForm):
        if not content.body or not content.body.strip():
            raise InvalidPayloadError("Free-form body must not be empty")

        if not is_window_open(context.last_inbound_at, now):
            raise WindowClosedError(
                f"No inbound message from {context.recipient_id} in the last 24h; "
                f"send a Template instead"
            )

        payload["type"] = "text"
        payload["text"] = {"preview_url": False, "body": content.body}
        message_type = "text"

    elif isinstance(content, Template):
        payload["type"] = "template"
        payload["template"] = _template_body(content)
        message_type = "template"

    else:
        raise InvalidPayloadError(f"Unsupported message content: {type(content).__name__}")

    return OutboundRequest(
        sender_identifier=context.sender_identifier,
        recipient=context.recipient_id,
        message_type=message_type,
        payload=payload,
    )


def _template_body(content: Template) -> Dict[str, Any]:
    if not content.name:
        raise InvalidPayloadError("Template name must not be empty")
    if not content.language:
        raise InvalidPayloadError("Template language code must not be empty")

    template: Dict[str, Any] = {
        "name": content.name,
        "language": {"code": content.language},
    }

    if content.parameters:
        template["components"] = [
            {
                "type": "body",
                "parameters": [
                    {"type": "text", "text": value} for value in content.parameters
                ],
            }
        ]

    return template
