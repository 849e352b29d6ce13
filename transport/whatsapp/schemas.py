"""
WhatsApp Cloud API - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Only defines the shape of Graph API responses the transport parses.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# SEND MESSAGE RESPONSE (SUCCESS)
# ============================================================================

class ContactReceipt(BaseModel):
    """Recipient as resolved by WhatsApp."""

    input: str
    wa_id: Optional[str] = None


class MessageReceipt(BaseModel):
    """Accepted message identifier."""

    id: str = Field(..., description="wamid.* identifier")
    message_status: Optional[str] = None


class WhatsAppMessageResponse(BaseModel):
    """Response from WhatsApp Cloud API when sending a message."""

    model_config = ConfigDict(extra="allow")  # Meta may add fields

    messaging_product: str = Field(default="whatsapp")
    contacts: List[ContactReceipt] = Field(default_factory=list)
    messages: List[MessageReceipt] = Field(..., min_length=1)

    @property
    def message_id(self) -> str:
        return self.messages[0].id


# ============================================================================
# ERROR RESPONSE
# ============================================================================

class GraphError(BaseModel):
    """
    Graph API error object.

    ref: https://developers.facebook.com/docs/graph-api/guides/error-handling
    """

    model_config = ConfigDict(extra="allow")

    message: str = ""
    type: Optional[str] = None
    code: Optional[int] = None
    error_subcode: Optional[int] = None
    fbtrace_id: Optional[str] = None


class GraphErrorEnvelope(BaseModel):
    """Top-level {"error": {...}} wrapper."""

    error: GraphError


# ============================================================================
# DEBUG TOKEN RESPONSE
# ============================================================================

class DebugTokenData(BaseModel):
    """Subset of /debug_token data used for scope checks."""

    model_config = ConfigDict(extra="allow")

    is_valid: bool = False
    app_id: Optional[str] = None
    scopes: List[str] = Field(default_factory=list)


class DebugTokenResponse(BaseModel):
    data: DebugTokenData
