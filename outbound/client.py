"""
Outbound Client

validate -> build -> send with retry -> SendResult

Input problems raise immediately (OutboundInputError subclasses).
Remote problems come back inside the SendResult.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from transport.whatsapp.base import MessageTransport

from .batch import DEFAULT_REQUESTS_PER_SECOND, send_batch
from .builder import build_request
from .retry import RetryPolicy, WaitFn, cancellable_wait, send_with_retry
from .types import OutboundMessage, OutboundRequest, SendContext, SendResult
from .validation import validate_recipient, validate_sender_identifier


@dataclass(frozen=True)
class BatchItem:
    """One entry of a bulk send."""

    recipient: str
    content: OutboundMessage
    last_inbound_at: Optional[datetime] = None


class OutboundClient:
    """
    Sends messages from one business phone number.

    The transport is passed in and owned by the caller; close() is a
    convenience that closes it.
    """

    def __init__(
        self,
        transport: MessageTransport,
        sender_identifier: str,
        retry_policy: Optional[RetryPolicy] = None,
        requests_per_second: float = DEFAULT_REQUESTS_PER_SECOND,
        clock: Optional[Callable[[], datetime]] = None,
        wait: WaitFn = cancellable_wait,
    ):
        if requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be > 0, got {requests_per_second}")

        self.transport = transport
        self.sender_identifier = validate_sender_identifier(sender_identifier)
        self.retry_policy = retry_policy or RetryPolicy()
        self.requests_per_second = requests_per_second
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._wait = wait

    def prepare(
        self,
        recipient: str,
        content: OutboundMessage,
        last_inbound_at: Optional[datetime] = None,
    ) -> OutboundRequest:
        """Validate inputs and build the request without sending it."""
        context = SendContext(
            recipient_id=validate_recipient(recipient),
            sender_identifier=self.sender_identifier,
            last_inbound_at=last_inbound_at,
        )
        return build_request(context, content, now=self._clock())

    def send(
        self,
        recipient: str,
        content: OutboundMessage,
        last_inbound_at: Optional[datetime] = None,
        cancel: Optional[threading.Event] = None,
    ) -> SendResult:
        """
        Send one message.

        Raises:
            OutboundInputError: Invalid recipient, closed window, naive timestamp...
        """
        request = self.prepare(recipient, content, last_inbound_at)
        outcome = send_with_retry(
            self.transport,
            request,
            self.retry_policy,
            cancel=cancel,
            wait=self._wait,
        )
        return SendResult.from_outcome(request.recipient, outcome)

    def send_many(
        self,
        items: Iterable[BatchItem],
        cancel: Optional[threading.Event] = None,
    ) -> List[SendResult]:
        """
        Send a batch at the configured rate.

        Every item is validated and built first, so bad input raises before
        anything goes out.
        """
        requests = [
            self.prepare(item.recipient, item.content, item.last_inbound_at)
            for item in items
        ]
        return send_batch(
            self.transport,
            requests,
            rate_per_second=self.requests_per_second,
            policy=self.retry_policy,
            cancel=cancel,
            wait=self._wait,
        )

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "OutboundClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
