"""
Normalized inbound records.

``ProcessedIncomingMessage`` is the flat form of one raw WhatsApp message:
identifiers, the destination context (phone number id / business id) and
exactly one populated payload group selected by ``type``. Records are frozen
once the normalizer has built them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wabridge.core.errors import NormalizationError
from wabridge.core.types import MessageType
from wabridge.schemas.whatsapp.message_types import SharedContact

PROCESSED_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


class MediaInfo(BaseModel):
    """Media reference extracted from image/audio/video/document/sticker."""

    model_config = PROCESSED_MODEL_CONFIG

    id: str
    mime_type: str = ""
    caption: str | None = None
    filename: str | None = None
    sha256: str | None = None


class LocationInfo(BaseModel):
    """Shared location."""

    model_config = PROCESSED_MODEL_CONFIG

    latitude: float
    longitude: float
    name: str | None = None
    address: str | None = None
    url: str | None = None


class InteractiveInfo(BaseModel):
    """
    Interactive reply identifiers.

    ``button_id`` is set for button replies (and template quick replies),
    ``list_id`` for list selections, ``flow_response`` for Flow submissions.
    """

    model_config = PROCESSED_MODEL_CONFIG

    type: str
    button_id: str | None = None
    list_id: str | None = None
    title: str | None = None
    description: str | None = None
    flow_response: Any = None


class ReactionInfo(BaseModel):
    """Reaction to a previously sent message."""

    model_config = PROCESSED_MODEL_CONFIG

    message_id: str
    emoji: str | None = None


class ProcessedIncomingMessage(BaseModel):
    """A normalized inbound message."""

    model_config = PROCESSED_MODEL_CONFIG

    id: str = Field(..., description="WhatsApp message ID")
    from_: str = Field(..., alias="from", description="Sender WhatsApp ID")
    timestamp: str = Field(..., description="Unix timestamp as sent by WhatsApp")
    type: MessageType = Field(..., description="Normalized message type")
    raw_type: str = Field(..., description="Type tag exactly as received")

    # Payload groups: exactly one is populated for known types
    text: str | None = None
    media: MediaInfo | None = None
    location: LocationInfo | None = None
    interactive: InteractiveInfo | None = None
    contact: list[SharedContact] | None = None
    reaction: ReactionInfo | None = None

    # Metadata
    context: str | None = Field(None, description="ID of the message replied to")
    profile_name: str | None = Field(None, description="Sender display name")
    phone_number_id: str = Field(
        ..., alias="phoneNumberId", description="Business number that received it"
    )
    business_id: str = Field(
        ..., alias="businessId", description="WhatsApp Business Account ID"
    )

    @property
    def is_reply(self) -> bool:
        """Check if this message replies to an earlier one."""
        return self.context is not None

    def to_summary_dict(self) -> dict[str, Any]:
        """
        Create a summary dictionary for logging.

        Returns:
            Dictionary with key message information for structured logging.
        """
        return {
            "message_id": self.id,
            "sender": self.from_,
            "timestamp": self.timestamp,
            "type": self.type.value,
            "phone_number_id": self.phone_number_id,
            "is_reply": self.is_reply,
        }


class MessageStatusUpdate(BaseModel):
    """A normalized delivery status for an outgoing message."""

    model_config = PROCESSED_MODEL_CONFIG

    id: str
    status: str
    timestamp: str
    recipient_id: str
    phone_number_id: str = Field(..., alias="phoneNumberId")
    business_id: str = Field(..., alias="businessId")
    conversation: dict[str, Any] | None = None
    pricing: dict[str, Any] | None = None
    errors: list[dict[str, Any]] = Field(default_factory=list)


class NormalizationResult(BaseModel):
    """Everything produced from one webhook delivery."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    messages: list[ProcessedIncomingMessage] = Field(default_factory=list)
    errors: list[NormalizationError] = Field(default_factory=list)
    statuses: list[MessageStatusUpdate] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
