"""
Basic message models for WhatsApp messaging.

Text messages and the Cloud API response returned for every send.
"""

from typing import Literal

from pydantic import BaseModel, Field

from wabridge.messaging.whatsapp.models.base_models import (
    OUTGOING_MODEL_CONFIG,
    OutgoingMessageBase,
)


class TextBody(BaseModel):
    """Text payload."""

    model_config = OUTGOING_MODEL_CONFIG

    body: str = Field(..., description="Text content of the message")
    preview_url: bool | None = Field(None, description="Render link previews")


class TextMessage(OutgoingMessageBase):
    """Outgoing text message."""

    type: Literal["text"] = "text"
    text: TextBody


class ResponseContact(BaseModel):
    input: str = ""
    wa_id: str = ""


class ResponseMessage(BaseModel):
    id: str
    message_status: str | None = None


class MessageResponse(BaseModel):
    """Result of a successful send.

    Mirrors the Cloud API response body for ``POST /messages``.
    """

    messaging_product: str = "whatsapp"
    contacts: list[ResponseContact] = Field(default_factory=list)
    messages: list[ResponseMessage] = Field(default_factory=list)

    @property
    def message_id(self) -> str | None:
        """ID assigned by WhatsApp to the sent message."""
        return self.messages[0].id if self.messages else None
