"""
WhatsApp inbound message schema.

One ``WhatsAppIncomingMessage`` model covers every message type: the ``type``
tag selects which payload field must be present. Payload/tag disagreement is
a validation error that the normalizer turns into a NormalizationError.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from wabridge.core.types import InteractiveReplyType, MessageType
from wabridge.schemas.whatsapp.base_models import INBOUND_MODEL_CONFIG, MessageContext


class TextContent(BaseModel):
    """Text message content."""

    model_config = INBOUND_MODEL_CONFIG

    body: str = Field(..., description="The text content of the message")


class MediaContent(BaseModel):
    """Media payload shared by image, audio, video, document and sticker."""

    model_config = INBOUND_MODEL_CONFIG

    id: str = Field(..., description="Media ID to download the file")
    mime_type: str = Field("", description="MIME type of the media")
    sha256: str | None = Field(None, description="SHA256 hash of the file")
    caption: str | None = Field(None, description="Caption (image, video, document)")
    filename: str | None = Field(None, description="Original filename (document)")
    animated: bool | None = Field(None, description="Animated flag (sticker)")
    voice: bool | None = Field(None, description="Voice note flag (audio)")


class LocationContent(BaseModel):
    """Location message content."""

    model_config = INBOUND_MODEL_CONFIG

    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")
    name: str | None = Field(None, description="Location name")
    address: str | None = Field(None, description="Location address")
    url: str | None = Field(None, description="URL for the location")


class ContactName(BaseModel):
    """Name block of a shared contact card."""

    model_config = INBOUND_MODEL_CONFIG

    formatted_name: str = Field("", description="Full formatted name")
    first_name: str | None = None
    last_name: str | None = None


class ContactPhone(BaseModel):
    """Phone entry of a shared contact card."""

    model_config = INBOUND_MODEL_CONFIG

    phone: str | None = None
    wa_id: str | None = None
    type: str | None = None


class SharedContact(BaseModel):
    """A contact card shared by the user."""

    model_config = INBOUND_MODEL_CONFIG

    name: ContactName = Field(default_factory=ContactName)
    phones: list[ContactPhone] = Field(default_factory=list)
    emails: list[dict[str, Any]] = Field(default_factory=list)
    addresses: list[dict[str, Any]] = Field(default_factory=list)
    org: dict[str, Any] | None = None
    urls: list[dict[str, Any]] = Field(default_factory=list)
    birthday: str | None = None


class ButtonReply(BaseModel):
    """Reply data from an interactive button."""

    model_config = INBOUND_MODEL_CONFIG

    id: str = Field(..., description="Button ID (set when creating the button)")
    title: str = Field("", description="Button label text displayed to user")


class ListReply(BaseModel):
    """Reply data from an interactive list selection."""

    model_config = INBOUND_MODEL_CONFIG

    id: str = Field(..., description="Row ID (set when creating the list row)")
    title: str = Field("", description="Row title displayed to user")
    description: str | None = Field(None, description="Row description")


class FlowReply(BaseModel):
    """Reply data from a WhatsApp Flow (``nfm_reply``)."""

    model_config = INBOUND_MODEL_CONFIG

    response_json: str = Field(..., description="Flow response as a JSON string")
    body: str | None = Field(None, description="Body text shown in the chat")
    name: str | None = Field(None, description="Flow name, usually 'flow'")


class InteractiveContent(BaseModel):
    """
    Interactive message reply content.

    Contains the reply object matching ``type``; unknown sub-types are kept
    as-is and routed to the unknown handler.
    """

    model_config = INBOUND_MODEL_CONFIG

    type: str = Field(..., description="Type of interactive reply")
    button_reply: ButtonReply | None = None
    list_reply: ListReply | None = None
    nfm_reply: FlowReply | None = None

    @model_validator(mode="after")
    def validate_reply_present(self):
        """Validate that the reply object named by ``type`` is present."""
        required = {
            InteractiveReplyType.BUTTON_REPLY.value: self.button_reply,
            InteractiveReplyType.LIST_REPLY.value: self.list_reply,
            InteractiveReplyType.NFM_REPLY.value: self.nfm_reply,
        }
        if self.type in required and required[self.type] is None:
            raise ValueError(f"interactive.{self.type} is required when type='{self.type}'")
        return self


class ButtonContent(BaseModel):
    """Quick reply button content from a template message."""

    model_config = INBOUND_MODEL_CONFIG

    payload: str = Field(..., description="Developer-defined button payload")
    text: str = Field("", description="Button label")


class ReactionContent(BaseModel):
    """Reaction to a previously sent message."""

    model_config = INBOUND_MODEL_CONFIG

    message_id: str = Field(..., description="ID of the message reacted to")
    emoji: str | None = Field(None, description="Emoji, absent when removed")


# Payload field name for every type that carries one
PAYLOAD_FIELDS: dict[MessageType, str] = {
    MessageType.TEXT: "text",
    MessageType.IMAGE: "image",
    MessageType.AUDIO: "audio",
    MessageType.VIDEO: "video",
    MessageType.DOCUMENT: "document",
    MessageType.STICKER: "sticker",
    MessageType.LOCATION: "location",
    MessageType.CONTACTS: "contacts",
    MessageType.INTERACTIVE: "interactive",
    MessageType.BUTTON: "button",
    MessageType.REACTION: "reaction",
}


class WhatsAppIncomingMessage(BaseModel):
    """
    A raw inbound WhatsApp message.

    Mandatory ``id``, ``from``, ``timestamp`` and ``type``; exactly one payload
    field matching ``type`` for known types.
    """

    model_config = INBOUND_MODEL_CONFIG

    from_: str = Field(..., alias="from", description="Sender WhatsApp ID")
    id: str = Field(..., description="Unique WhatsApp message ID")
    timestamp: str = Field(..., description="Unix timestamp when the message was sent")
    type: str = Field(..., description="Message type tag")

    text: TextContent | None = None
    image: MediaContent | None = None
    audio: MediaContent | None = None
    video: MediaContent | None = None
    document: MediaContent | None = None
    sticker: MediaContent | None = None
    location: LocationContent | None = None
    contacts: list[SharedContact] | None = None
    interactive: InteractiveContent | None = None
    button: ButtonContent | None = None
    reaction: ReactionContent | None = None

    context: MessageContext | None = Field(
        None, description="Reply / forward context"
    )

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Any:
        """Accept numeric timestamps and keep them as strings."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("id", "from_", "type")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate mandatory identifiers are not empty."""
        if not v:
            raise ValueError("Field cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_payload_matches_type(self):
        """Validate the payload field agrees with the type tag."""
        message_type = MessageType.from_tag(self.type)
        expected = PAYLOAD_FIELDS.get(message_type)

        if expected is not None and getattr(self, expected) is None:
            raise ValueError(f"type '{self.type}' requires a '{expected}' payload")

        present = [
            field
            for field in PAYLOAD_FIELDS.values()
            if field != expected and getattr(self, field) is not None
        ]
        if expected is not None and present:
            raise ValueError(
                f"type '{self.type}' cannot carry payload field(s): {', '.join(present)}"
            )
        return self

    @property
    def message_type(self) -> MessageType:
        """Get the type tag as an enum (UNKNOWN for unrecognised tags)."""
        return MessageType.from_tag(self.type)
