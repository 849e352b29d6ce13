"""
WhatsApp Cloud API Transport

Sends one message per call to the Graph API /messages endpoint.
No retries here. No window logic. No payload building.

Every failure comes back as a SendErr:
- Graph error body  -> classified from (code, error_subcode)
- Timeout / network -> TRANSIENT, http_status=None
- Unparseable error -> by HTTP status (429 rate limited, 5xx transient)
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from outbound.classifier import classify
from outbound.errors import MissingCredentialError
from outbound.types import ErrorClassification, OutboundRequest, SendErr, SendOk, SendOutcome

from .base import MessageTransport
from .schemas import GraphErrorEnvelope, WhatsAppMessageResponse

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://graph.facebook.com"
DEFAULT_API_VERSION = "v18.0"
DEFAULT_TIMEOUT = 10.0


class CloudAPITransport(MessageTransport):
    """
    HTTP transport backed by a single pooled httpx.Client.

    Construct once, pass it in, close it when the owning process is done.

    Usage:
        with CloudAPITransport(access_token=token) as transport:
            outcome = transport.send(request)
    """

    def __init__(
        self,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            access_token: Bearer token (system user or user access token)
            api_version: Graph API version, e.g. "v18.0"
            base_url: Graph API host
            timeout: Per-request timeout in seconds
            client: Pre-built httpx.Client (tests inject a MockTransport here)

        Raises:
            MissingCredentialError: Empty access token
        """
        if not access_token or not access_token.strip():
            raise MissingCredentialError("WhatsApp access token is empty")

        self.api_version = api_version
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._access_token = access_token
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def access_token(self) -> str:
        return self._access_token

    @property
    def http_client(self) -> httpx.Client:
        return self._client

    @property
    def auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self._access_token}"}

    def graph_url(self, path: str) -> str:
        return f"{self.base_url}/{self.api_version}/{path.lstrip('/')}"

    def messages_url(self, sender_identifier: str) -> str:
        return self.graph_url(f"{sender_identifier}/messages")

    def send(self, request: OutboundRequest) -> SendOutcome:
        """
        POST the request body to /{phone_number_id}/messages.

        Returns:
            SendOk or SendErr; never raises for network/API failures
        """
        endpoint = self.messages_url(request.sender_identifier)
        headers = {**self.auth_headers, "Content-Type": "application/json"}

        try:
            response = self._client.post(
                endpoint,
                json=request.body(),
                headers=headers,
                timeout=self.timeout,
            )

        except httpx.TimeoutException as e:
            logger.warning(
                f"WhatsApp request timed out after {self.timeout}s",
                extra={"recipient": request.recipient, "error": str(e)},
            )
            return SendErr(
                http_status=None,
                error_code=None,
                message=f"Request timed out: {e}",
                classification=ErrorClassification.TRANSIENT,
            )

        except httpx.RequestError as e:
            logger.warning(
                f"HTTP request failed: {e}",
                extra={"recipient": request.recipient, "error": str(e)},
            )
            return SendErr(
                http_status=None,
                error_code=None,
                message=f"HTTP request failed: {e}",
                classification=ErrorClassification.TRANSIENT,
            )

        if response.is_success:
            return self._parse_success(request, response)

        return self._parse_error(request, response)

    def _parse_success(self, request: OutboundRequest, response: httpx.Response) -> SendOutcome:
        try:
            result = WhatsAppMessageResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            # 2xx without a message id: we cannot prove delivery
            logger.error(
                f"Unexpected success body from WhatsApp: {e}",
                extra={"recipient": request.recipient, "status_code": response.status_code},
            )
            return SendErr(
                http_status=response.status_code,
                error_code=None,
                message=f"Malformed success response: {response.text[:200]}",
                classification=ErrorClassification.DEVELOPER_FIXABLE,
            )

        logger.info(
            f"Message sent to {request.recipient}",
            extra={
                "recipient": request.recipient,
                "message_type": request.message_type,
                "response_id": result.message_id,
            },
        )
        return SendOk(message_id=result.message_id)

    def _parse_error(self, request: OutboundRequest, response: httpx.Response) -> SendErr:
        try:
            envelope = GraphErrorEnvelope.model_validate(response.json())
        except (ValueError, ValidationError):
            envelope = None

        if envelope is None or envelope.error.code is None:
            if response.status_code == 429:
                classification = ErrorClassification.RATE_LIMITED
            elif response.status_code >= 500:
                classification = ErrorClassification.TRANSIENT
            else:
                classification = ErrorClassification.DEVELOPER_FIXABLE

            logger.error(
                f"WhatsApp API error: {response.status_code} - {response.text[:200]}",
                extra={"status_code": response.status_code, "recipient": request.recipient},
            )
            message = envelope.error.message if envelope else ""
            return SendErr(
                http_status=response.status_code,
                error_code=None,
                message=message or response.text[:200] or f"HTTP {response.status_code}",
                classification=classification,
            )

        error = envelope.error
        classification = classify(error.code, error.error_subcode)

        logger.error(
            f"WhatsApp API error: {response.status_code} - ({error.code}) {error.message}",
            extra={
                "status_code": response.status_code,
                "error_code": error.code,
                "error_subcode": error.error_subcode,
                "classification": classification.value,
                "fbtrace_id": error.fbtrace_id,
                "recipient": request.recipient,
            },
        )
        return SendErr(
            http_status=response.status_code,
            error_code=error.code,
            error_subcode=error.error_subcode,
            message=error.message,
            classification=classification,
        )

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()
