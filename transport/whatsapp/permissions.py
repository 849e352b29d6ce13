"""
Access Token Scope Check

Confirms a token carries the permissions the /messages endpoint needs
before any send is attempted. A token without whatsapp_business_messaging
fails every send with error 200, which retrying cannot fix.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Tuple

import httpx
from pydantic import ValidationError

from .schemas import DebugTokenResponse
from .sender import CloudAPITransport

logger = logging.getLogger(__name__)


_TOKEN_QUERY = re.compile(r"((?:input_token|access_token)=)[^&\s\"]+")


class TokenRedactingFilter(logging.Filter):
    """
    Masks token query parameters in log records.

    httpx logs every request URL at INFO on the "httpx" logger, and
    /debug_token takes the token as a query parameter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _redact(record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(_redact_arg(arg) for arg in record.args)

        return True


def _redact(text: str) -> str:
    return _TOKEN_QUERY.sub(r"\1[REDACTED]", text)


def _redact_arg(arg):
    if not isinstance(arg, (str, httpx.URL)):
        return arg
    text = str(arg)
    redacted = _redact(text)
    return arg if redacted == text else redacted


logging.getLogger("httpx").addFilter(TokenRedactingFilter())


REQUIRED_SCOPES: Tuple[str, ...] = (
    "whatsapp_business_messaging",
    "whatsapp_business_management",
)


class TokenScopeCheckError(Exception):
    """Token introspection request failed."""
    pass


@dataclass(frozen=True)
class ScopeCheck:
    """Result of a /debug_token lookup."""

    is_valid: bool
    granted: Tuple[str, ...]
    missing: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        return self.is_valid and not self.missing


def missing_scopes(granted: Iterable[str], required: Iterable[str] = REQUIRED_SCOPES) -> Tuple[str, ...]:
    """Required scopes absent from granted, in required order."""
    granted_set = set(granted)
    return tuple(scope for scope in required if scope not in granted_set)


def check_token_scopes(
    transport: CloudAPITransport,
    required: Iterable[str] = REQUIRED_SCOPES,
) -> ScopeCheck:
    """
    Look up the transport's own token via GET /debug_token.

    Raises:
        TokenScopeCheckError: Network failure, HTTP error or unexpected body
    """
    required = tuple(required)

    try:
        response = transport.http_client.get(
            transport.graph_url("debug_token"),
            params={"input_token": transport.access_token},
            headers=transport.auth_headers,
            timeout=transport.timeout,
        )
        response.raise_for_status()
        data = DebugTokenResponse.model_validate(response.json()).data

    except httpx.HTTPStatusError as e:
        raise TokenScopeCheckError(
            f"debug_token returned {e.response.status_code}"
        ) from e

    except httpx.RequestError as e:
        raise TokenScopeCheckError(f"HTTP request failed: {e}") from e

    except (ValueError, ValidationError) as e:
        raise TokenScopeCheckError(f"Unexpected debug_token response: {e}") from e

    result = ScopeCheck(
        is_valid=data.is_valid,
        granted=tuple(data.scopes),
        missing=missing_scopes(data.scopes, required),
    )

    if not result.ok:
        logger.warning(
            "Access token is not usable for messaging",
            extra={"is_valid": result.is_valid, "missing_scopes": list(result.missing)},
        )

    return result
