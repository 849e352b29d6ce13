"""
Message Builder Tests

Window rule, timezone rule, and complete request bodies.
"""

from datetime import datetime, timedelta, timezone

import pytest

from outbound.builder import build_request, is_window_open
from outbound.errors import (
    InvalidFormatError,
    InvalidPayloadError,
    MissingTimezoneError,
    WindowClosedError,
    WrongIdentifierTypeError,
)
from outbound.types import FreeForm, OutboundRequest, SendContext, Template


NOW = datetime(2024, 2, 9, 12, 0, tzinfo=timezone.utc)
RECIPIENT = "+15551234567"
SENDER = "123456789012345"


def make_context(last_inbound_at=None):
    return SendContext(
        recipient_id=RECIPIENT,
        sender_identifier=SENDER,
        last_inbound_at=last_inbound_at,
    )


class TestSendContext:
    """Context validates its identifiers and timestamp."""

    def test_invalid_recipient_rejected(self):
        with pytest.raises(InvalidFormatError):
            SendContext(recipient_id="5551234567", sender_identifier=SENDER)

    def test_account_id_as_sender_rejected(self):
        with pytest.raises(WrongIdentifierTypeError):
            SendContext(recipient_id=RECIPIENT, sender_identifier="1234567890123456")

    def test_naive_last_inbound_rejected_on_construction(self):
        """A naive timestamp never makes it into a context."""
        naive = (NOW - timedelta(hours=1)).replace(tzinfo=None)

        with pytest.raises(MissingTimezoneError):
            SendContext(recipient_id=RECIPIENT, sender_identifier=SENDER, last_inbound_at=naive)

    def test_aware_last_inbound_accepted(self):
        context = make_context(NOW)

        assert context.last_inbound_at == NOW


class TestFreeFormWindow:
    """Free-form text only inside the 24h window."""

    def test_within_window_succeeds(self):
        """Last inbound 23h ago: free-form allowed."""
        context = make_context(NOW - timedelta(hours=23))

        request = build_request(context, FreeForm("Your order shipped"), now=NOW)

        assert isinstance(request, OutboundRequest)
        assert request.message_type == "text"
        assert request.payload["text"]["body"] == "Your order shipped"

    def test_outside_window_fails(self):
        """Last inbound 25h ago: WindowClosed, no silent template."""
        context = make_context(NOW - timedelta(hours=25))

        with pytest.raises(WindowClosedError):
            build_request(context, FreeForm("Hello"), now=NOW)

    def test_exactly_24h_is_closed(self):
        """The window is open strictly before the 24h mark."""
        context = make_context(NOW - timedelta(hours=24))

        with pytest.raises(WindowClosedError):
            build_request(context, FreeForm("Hello"), now=NOW)

    def test_no_inbound_message_fails(self):
        """Never heard from the customer: no free-form."""
        with pytest.raises(WindowClosedError):
            build_request(make_context(None), FreeForm("Hello"), now=NOW)

    def test_other_timezone_compared_correctly(self):
        """Aware datetimes in any zone compare by instant."""
        plus_five = timezone(timedelta(hours=5))
        last = (NOW - timedelta(hours=23)).astimezone(plus_five)

        request = build_request(make_context(last), FreeForm("Hi"), now=NOW)

        assert request.message_type == "text"


class TestTimezoneRule:
    """Naive timestamps are rejected, never coerced."""

    def test_naive_recent_timestamp_rejected(self):
        naive = (NOW - timedelta(hours=1)).replace(tzinfo=None)

        with pytest.raises(MissingTimezoneError):
            build_request(make_context(naive), FreeForm("Hello"), now=NOW)

    def test_naive_old_timestamp_rejected(self):
        """MissingTimezone wins over WindowClosed."""
        naive = (NOW - timedelta(days=3)).replace(tzinfo=None)

        with pytest.raises(MissingTimezoneError):
            build_request(make_context(naive), FreeForm("Hello"), now=NOW)

    def test_naive_timestamp_rejected_for_template(self):
        naive = NOW.replace(tzinfo=None)

        with pytest.raises(MissingTimezoneError):
            build_request(make_context(naive), Template("order_update", "en_US"), now=NOW)

    def test_naive_now_rejected(self):
        with pytest.raises(MissingTimezoneError):
            is_window_open(NOW, now=NOW.replace(tzinfo=None))


class TestTemplateRequests:
    """Templates are allowed any time."""

    def test_template_outside_window(self):
        context = make_context(NOW - timedelta(days=10))

        request = build_request(
            context,
            Template("order_update", "en_US", ["Alice", "#1042"]),
            now=NOW,
        )

        assert request.message_type == "template"
        template = request.body()["template"]
        assert template["name"] == "order_update"
        assert template["language"] == {"code": "en_US"}
        assert template["components"] == [{
            "type": "body",
            "parameters": [
                {"type": "text", "text": "Alice"},
                {"type": "text", "text": "#1042"},
            ],
        }]

    def test_template_without_parameters_has_no_components(self):
        request = build_request(make_context(), Template("hello_world", "en_US"), now=NOW)

        assert "components" not in request.payload["template"]

    def test_parameter_order_preserved(self):
        params = ["c", "a", "b"]
        request = build_request(make_context(), Template("t", "en", params), now=NOW)

        texts = [p["text"] for p in request.payload["template"]["components"][0]["parameters"]]
        assert texts == params

    def test_empty_template_name_rejected(self):
        with pytest.raises(InvalidPayloadError):
            build_request(make_context(), Template("", "en_US"), now=NOW)

    def test_empty_language_rejected(self):
        with pytest.raises(InvalidPayloadError):
            build_request(make_context(), Template("hello_world", ""), now=NOW)


class TestRequestShape:
    """Every mandatory field is present."""

    def test_free_form_mandatory_fields(self):
        request = build_request(
            make_context(NOW - timedelta(minutes=5)), FreeForm("Hi"), now=NOW
        )

        assert request.payload["messaging_product"] == "whatsapp"
        assert request.payload["recipient_type"] == "individual"
        assert request.payload["to"] == RECIPIENT
        assert request.payload["type"] == "text"
        assert request.sender_identifier == SENDER
        assert request.recipient == RECIPIENT

    def test_empty_body_rejected(self):
        with pytest.raises(InvalidPayloadError):
            build_request(make_context(NOW), FreeForm("   "), now=NOW)

    def test_unknown_content_rejected(self):
        with pytest.raises(InvalidPayloadError):
            build_request(make_context(NOW), "just a string", now=NOW)  # type: ignore[arg-type]


class TestIsWindowOpen:
    def test_none_is_closed(self):
        assert is_window_open(None, NOW) is False

    def test_recent_is_open(self):
        assert is_window_open(NOW - timedelta(hours=2), NOW) is True


class TestRequestImmutability:
    """A built request cannot be altered between build and send."""

    def make_request(self):
        return build_request(
            make_context(NOW - timedelta(minutes=5)),
            Template("order_update", "en_US", ["Alice"]),
            now=NOW,
        )

    def test_top_level_payload_read_only(self):
        request = self.make_request()

        with pytest.raises(TypeError):
            request.payload["to"] = "+15550000000"  # type: ignore[index]

        assert request.payload["to"] == RECIPIENT

    def test_nested_payload_read_only(self):
        request = self.make_request()

        with pytest.raises(TypeError):
            request.payload["template"]["name"] = "other"  # type: ignore[index]

        with pytest.raises(AttributeError):
            request.payload["template"]["components"].append({})  # type: ignore[union-attr]

    def test_request_is_hashable(self):
        request = self.make_request()

        assert hash(request) == hash(request)
        assert request in {request}

    def test_body_returns_plain_json(self):
        """body() is a fresh, mutable copy for serialization."""
        request = self.make_request()

        body = request.body()
        body["to"] = "+15550000000"

        assert isinstance(body["template"], dict)
        assert isinstance(body["template"]["components"], list)
        assert body["template"]["components"][0]["parameters"] == [{"type": "text", "text": "Alice"}]
        assert request.payload["to"] == RECIPIENT

    def test_mutating_source_dict_does_not_leak(self):
        source = {"messaging_product": "whatsapp", "to": RECIPIENT, "text": {"body": "Hi"}}
        request = OutboundRequest(
            sender_identifier=SENDER,
            recipient=RECIPIENT,
            message_type="text",
            payload=source,
        )

        source["text"]["body"] = "changed"

        assert request.payload["text"]["body"] == "Hi"
