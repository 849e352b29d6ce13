"""
Access Token Scope Check Tests

/debug_token lookups through a mocked Graph API.
"""

import logging

import httpx
import pytest

from transport.whatsapp.permissions import (
    REQUIRED_SCOPES,
    TokenRedactingFilter,
    TokenScopeCheckError,
    check_token_scopes,
    missing_scopes,
)
from transport.whatsapp.sender import CloudAPITransport


def make_transport(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return CloudAPITransport(access_token="EAAG-test", client=client)


def debug_token_response(scopes, is_valid=True):
    return httpx.Response(200, json={
        "data": {"app_id": "1000", "is_valid": is_valid, "scopes": scopes},
    })


class TestMissingScopes:
    def test_all_granted(self):
        assert missing_scopes(["email", *REQUIRED_SCOPES]) == ()

    def test_reports_in_required_order(self):
        assert missing_scopes([]) == REQUIRED_SCOPES

    def test_custom_required(self):
        assert missing_scopes(["a"], required=["a", "b"]) == ("b",)


class TestCheckTokenScopes:
    def test_queries_debug_token_with_own_token(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["input_token"] = request.url.params.get("input_token")
            seen["auth"] = request.headers.get("Authorization")
            return debug_token_response(list(REQUIRED_SCOPES))

        result = check_token_scopes(make_transport(handler))

        assert seen["path"] == "/v18.0/debug_token"
        assert seen["input_token"] == "EAAG-test"
        assert seen["auth"] == "Bearer EAAG-test"
        assert result.ok

    def test_missing_messaging_scope(self):
        transport = make_transport(
            lambda request: debug_token_response(["whatsapp_business_management"])
        )

        result = check_token_scopes(transport)

        assert not result.ok
        assert result.missing == ("whatsapp_business_messaging",)

    def test_invalid_token_not_ok(self):
        transport = make_transport(
            lambda request: debug_token_response(list(REQUIRED_SCOPES), is_valid=False)
        )

        assert check_token_scopes(transport).ok is False

    def test_http_error_raises(self):
        transport = make_transport(lambda request: httpx.Response(400, json={"error": {}}))

        with pytest.raises(TokenScopeCheckError):
            check_token_scopes(transport)

    def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(TokenScopeCheckError):
            check_token_scopes(make_transport(handler))

    def test_malformed_body_raises(self):
        transport = make_transport(lambda request: httpx.Response(200, text="not json"))

        with pytest.raises(TokenScopeCheckError):
            check_token_scopes(transport)


class TestTokenNotLogged:
    """The token travels in the /debug_token query string; logs must not carry it."""

    SECRET = "EAAG-SECRET-TOKEN"

    def test_httpx_request_log_is_redacted(self, caplog):
        client = httpx.Client(
            transport=httpx.MockTransport(
                lambda request: debug_token_response(list(REQUIRED_SCOPES))
            )
        )
        transport = CloudAPITransport(access_token=self.SECRET, client=client)

        with caplog.at_level(logging.DEBUG):
            check_token_scopes(transport)

        assert caplog.records
        for record in caplog.records:
            assert self.SECRET not in record.getMessage()

    def test_failed_lookup_log_is_redacted(self, caplog):
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        transport = CloudAPITransport(access_token=self.SECRET, client=client)

        with caplog.at_level(logging.DEBUG):
            with pytest.raises(TokenScopeCheckError) as exc_info:
                check_token_scopes(transport)

        assert self.SECRET not in str(exc_info.value)
        for record in caplog.records:
            assert self.SECRET not in record.getMessage()


class TestTokenRedactingFilter:
    def make_record(self, msg, args):
        return logging.LogRecord("httpx", logging.INFO, __file__, 1, msg, args, None)

    def test_masks_url_argument(self):
        url = httpx.URL("https://graph.facebook.com/v18.0/debug_token?input_token=abc123&x=1")
        record = self.make_record('HTTP Request: %s %s "%s %d %s"', ("GET", url, "HTTP/1.1", 200, "OK"))

        assert TokenRedactingFilter().filter(record) is True

        message = record.getMessage()
        assert "abc123" not in message
        assert "input_token=[REDACTED]&x=1" in message
        assert "200 OK" in message

    def test_masks_token_in_message_text(self):
        record = self.make_record("GET /me?access_token=abc123", None)

        TokenRedactingFilter().filter(record)

        assert record.getMessage() == "GET /me?access_token=[REDACTED]"

    def test_leaves_other_records_alone(self):
        record = self.make_record("Message sent to %s", ("+15551234567",))

        TokenRedactingFilter().filter(record)

        assert record.getMessage() == "Message sent to +15551234567"
