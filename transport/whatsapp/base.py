"""
Message Transport abstract interface.

Role: Deliver one OutboundRequest, report one SendOutcome.

Rules:
- Exactly one network attempt per send() call (retries live elsewhere)
- Never raises for network or API failures
- All failures are explicit and typed (SendErr)
"""

from abc import ABC, abstractmethod

from outbound.types import OutboundRequest, SendOutcome


class MessageTransport(ABC):
    """
    Abstract transport boundary.
    Retry and batch code must depend ONLY on this interface.
    """

    @abstractmethod
    def send(self, request: OutboundRequest) -> SendOutcome:
        """
        Send a single message.

        Args:
            request: Fully built OutboundRequest

        Returns:
            SendOk with the message ID, or SendErr with a classification
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release any held connections."""

    def __enter__(self) -> "MessageTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
