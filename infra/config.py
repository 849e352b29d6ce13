"""
Outbound configuration system.

Environment-based settings with documented defaults.
Loads a .env file from the project root when present.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv

from outbound.batch import DEFAULT_REQUESTS_PER_SECOND
from outbound.errors import MissingCredentialError
from outbound.retry import RetryPolicy
from outbound.validation import validate_sender_identifier
from transport.whatsapp import (
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    CloudAPITransport,
    MessageTransport,
    StubTransport,
)


TransportType = Literal["cloud", "stub"]

ENV_PATH = Path(__file__).parent.parent / ".env"


@dataclass
class OutboundConfig:
    """Outbound messaging configuration."""

    # Credentials
    access_token: str
    phone_number_id: str

    # Graph API
    api_version: str = DEFAULT_API_VERSION
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_TIMEOUT   # seconds

    # Retry
    max_attempts: int = 5
    base_delay: float = 1.0                    # seconds, doubled per attempt

    # Pacing
    requests_per_second: float = DEFAULT_REQUESTS_PER_SECOND

    # "stub" never touches the network
    transport: TransportType = "cloud"

    def __post_init__(self):
        if self.transport not in ("cloud", "stub"):
            raise ValueError(f"transport must be 'cloud' or 'stub', got {self.transport!r}")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be > 0, got {self.request_timeout}")
        if self.requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be > 0, got {self.requests_per_second}")

        validate_sender_identifier(self.phone_number_id)
        # Surfaces bad retry values here rather than at first send
        self.create_retry_policy()

    @classmethod
    def from_env(cls, env_file: Optional[Path] = ENV_PATH) -> "OutboundConfig":
        """
        Load configuration from environment variables.

        Variables already set in the environment win over the .env file.
        """
        if env_file is not None:
            load_dotenv(env_file)

        return cls(
            access_token=os.getenv("WHATSAPP_ACCESS_TOKEN", ""),
            phone_number_id=os.getenv("WHATSAPP_PHONE_NUMBER_ID", ""),
            api_version=os.getenv("WHATSAPP_API_VERSION", DEFAULT_API_VERSION),
            base_url=os.getenv("WHATSAPP_GRAPH_BASE_URL", DEFAULT_BASE_URL),
            request_timeout=float(os.getenv("WHATSAPP_REQUEST_TIMEOUT", str(DEFAULT_TIMEOUT))),
            max_attempts=int(os.getenv("WHATSAPP_MAX_ATTEMPTS", "5")),
            base_delay=float(os.getenv("WHATSAPP_BASE_DELAY", "1.0")),
            requests_per_second=float(
                os.getenv("WHATSAPP_REQUESTS_PER_SECOND", str(DEFAULT_REQUESTS_PER_SECOND))
            ),
            transport=os.getenv("WHATSAPP_TRANSPORT", "cloud").lower(),  # type: ignore
        )

    def create_retry_policy(self) -> RetryPolicy:
        """Create the retry policy from configuration."""
        return RetryPolicy(max_attempts=self.max_attempts, base_delay=self.base_delay)

    def create_transport(self) -> MessageTransport:
        """
        Create the transport based on configuration.

        Raises:
            MissingCredentialError: cloud transport without an access token
        """
        if self.transport == "stub":
            return StubTransport()

        if not self.access_token:
            raise MissingCredentialError("WHATSAPP_ACCESS_TOKEN not configured")

        return CloudAPITransport(
            access_token=self.access_token,
            api_version=self.api_version,
            base_url=self.base_url,
            timeout=self.request_timeout,
        )


def get_config() -> OutboundConfig:
    """Load configuration from the environment."""
    return OutboundConfig.from_env()
