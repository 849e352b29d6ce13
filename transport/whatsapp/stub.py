"""
Stub transport for testing and dry-run mode.

Deterministic, no network, never fails silently.
"""

import logging
from typing import Callable, Iterable, List, Optional, Union

from outbound.types import OutboundRequest, SendOk, SendOutcome

from .base import MessageTransport

logger = logging.getLogger(__name__)


OutcomeScript = Union[Iterable[SendOutcome], Callable[[OutboundRequest], SendOutcome]]


class StubTransport(MessageTransport):
    """
    Fake transport that replays scripted outcomes.

    - No script: every send succeeds with a sequential wamid
    - Iterable: outcomes are returned in order; the last one repeats
    - Callable: called with each request
    """

    def __init__(self, outcomes: Optional[OutcomeScript] = None):
        self.requests: List[OutboundRequest] = []
        self.closed = False

        if callable(outcomes):
            self._responder: Optional[Callable[[OutboundRequest], SendOutcome]] = outcomes
            self._scripted: List[SendOutcome] = []
        else:
            self._responder = None
            self._scripted = list(outcomes or [])

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def send(self, request: OutboundRequest) -> SendOutcome:
        """Record the request and return the next scripted outcome."""
        self.requests.append(request)

        if self._responder is not None:
            outcome = self._responder(request)
        elif self._scripted:
            index = min(len(self.requests), len(self._scripted)) - 1
            outcome = self._scripted[index]
        else:
            outcome = SendOk(message_id=f"wamid.stub_{len(self.requests)}")

        logger.debug(
            f"Stub send to {request.recipient}: {type(outcome).__name__}",
            extra={"recipient": request.recipient, "call": len(self.requests)},
        )
        return outcome

    def close(self) -> None:
        self.closed = True
