"""
Shared pieces of inbound WhatsApp webhook payloads.

All inbound models drop keys they do not know, so fields Meta adds later do
not break parsing of otherwise valid deliveries.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

INBOUND_MODEL_CONFIG = ConfigDict(extra="ignore")


class WhatsAppMetadata(BaseModel):
    """``value.metadata``: the business number the delivery belongs to."""

    model_config = INBOUND_MODEL_CONFIG

    display_phone_number: str = ""
    phone_number_id: str = Field(..., min_length=1)


class ContactProfile(BaseModel):
    model_config = INBOUND_MODEL_CONFIG

    name: str = ""


class WhatsAppContact(BaseModel):
    """Sender entry from ``value.contacts``."""

    model_config = INBOUND_MODEL_CONFIG

    wa_id: str = ""
    profile: ContactProfile = Field(default_factory=ContactProfile)


class MessageContext(BaseModel):
    """
    ``message.context`` on replies and forwarded messages.

    ``id`` is the wamid of the quoted message; older payloads call it
    ``message_id``.
    """

    model_config = INBOUND_MODEL_CONFIG

    from_: str | None = Field(None, alias="from")
    id: str | None = Field(None, validation_alias=AliasChoices("id", "message_id"))
    forwarded: bool | None = None
    frequently_forwarded: bool | None = None
