"""
Shared fields for outgoing WhatsApp messages.

Every outgoing variant carries the same envelope: ``messaging_product``,
``recipient_type``, the normalized recipient and an optional reply context.
Variants add a ``type`` literal and one payload field named after it.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

OUTGOING_MODEL_CONFIG = ConfigDict(frozen=True)


class ReplyContext(BaseModel):
    """Reference to the message being replied to."""

    model_config = OUTGOING_MODEL_CONFIG

    message_id: str = Field(..., min_length=1, description="ID of the quoted message")


class OutgoingMessageBase(BaseModel):
    """Envelope fields common to every outgoing message."""

    model_config = OUTGOING_MODEL_CONFIG

    messaging_product: Literal["whatsapp"] = "whatsapp"
    recipient_type: Literal["individual"] = "individual"
    to: str = Field(..., description="Recipient phone number as +digits")
    context: ReplyContext | None = Field(None, description="Reply context")

    def to_payload(self) -> dict[str, Any]:
        """
        Convert to the JSON body expected by the Cloud API.

        Returns:
            JSON-serializable dictionary without unset optional fields
        """
        return self.model_dump(mode="json", exclude_none=True)
