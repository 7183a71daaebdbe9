"""
Top-level webhook container models for WhatsApp Business Platform.

These models describe the envelope structure only. Individual messages and
statuses are kept as raw dictionaries here so the normalizer can validate
each one independently and report a malformed message without rejecting the
whole delivery.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from wabridge.core.types import MESSAGES_FIELD, WHATSAPP_OBJECT_TAG
from wabridge.schemas.whatsapp.base_models import (
    INBOUND_MODEL_CONFIG,
    WhatsAppContact,
    WhatsAppMetadata,
)


class WebhookValue(BaseModel):
    """
    The core value object containing webhook payload data.

    Any of ``messages``, ``statuses``, ``contacts`` or ``errors`` may be
    absent or empty; absence is not an error.
    """

    model_config = INBOUND_MODEL_CONFIG

    messaging_product: str = Field(
        "whatsapp", description="Always 'whatsapp' for WhatsApp Business webhooks"
    )
    metadata: WhatsAppMetadata = Field(
        ..., description="Business phone number metadata"
    )
    contacts: list[WhatsAppContact] = Field(
        default_factory=list,
        description="Sender contact information (present for incoming messages)",
    )
    messages: list[Any] = Field(
        default_factory=list,
        description="Incoming messages (validated one by one by the normalizer)",
    )
    statuses: list[Any] = Field(
        default_factory=list,
        description="Outgoing message status updates",
    )
    errors: list[dict[str, Any]] = Field(
        default_factory=list, description="System, app, or account level errors"
    )

    @field_validator("contacts", "messages", "statuses", "errors", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """Treat an explicit null the same as an absent list."""
        return [] if v is None else v

    def find_contact(self, wa_id: str) -> WhatsAppContact | None:
        """
        Find the sender contact for a message.

        Args:
            wa_id: The ``from`` field of the message

        Returns:
            Matching contact, the first contact when none matches, or None
        """
        for contact in self.contacts:
            if contact.wa_id == wa_id:
                return contact
        return self.contacts[0] if self.contacts else None


class WebhookChange(BaseModel):
    """
    Change object describing what changed in the webhook.

    ``value`` stays raw: only ``messages`` changes are parsed into a
    ``WebhookValue``, and each one on its own. Other subscribed fields
    (``account_update``, ``message_template_status_update``, ...) share the
    endpoint but have unrelated shapes.
    """

    model_config = INBOUND_MODEL_CONFIG

    field: str = Field("messages", description="Subscribed field, usually 'messages'")
    value: Any = Field(None, description="Raw webhook payload data")

    @property
    def carries_messages(self) -> bool:
        return self.field == MESSAGES_FIELD


class WebhookEntry(BaseModel):
    """Entry object for one WhatsApp Business Account."""

    model_config = INBOUND_MODEL_CONFIG

    id: str = Field("", description="WhatsApp Business Account ID")
    changes: list[WebhookChange] = Field(
        default_factory=list, description="Changes (typically a single one)"
    )


class WhatsAppWebhook(BaseModel):
    """
    One webhook delivery: the full JSON body of a POST from Meta.

    Structure::

        {"object": "whatsapp_business_account",
         "entry": [{"id": ..., "changes": [{"field": ..., "value": {...}}]}]}
    """

    model_config = INBOUND_MODEL_CONFIG

    object: str = Field(..., description="Always 'whatsapp_business_account'")
    entry: list[WebhookEntry] = Field(
        default_factory=list, description="Ordered list of webhook entries"
    )

    @property
    def is_whatsapp_business(self) -> bool:
        """Check the object tag identifies a WhatsApp Business delivery."""
        return self.object == WHATSAPP_OBJECT_TAG
