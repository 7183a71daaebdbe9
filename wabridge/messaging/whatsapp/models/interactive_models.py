"""
Interactive message models for WhatsApp messaging.

Supports four types of interactive messages:
1. Button Messages - Quick reply buttons (max 3)
2. List Messages - Sectioned lists with rows (max 10 sections, 10 rows each)
3. Call-to-Action Messages - URL buttons with external links
4. Flow Messages - Open a WhatsApp Flow

The ``action`` object is kept in wire shape; its rules are enforced by the
builder so every violation can be reported at once.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from wabridge.core.types import InteractiveType
from wabridge.messaging.whatsapp.models.base_models import (
    OUTGOING_MODEL_CONFIG,
    OutgoingMessageBase,
)


class InteractiveBody(BaseModel):
    model_config = OUTGOING_MODEL_CONFIG

    text: str = Field(..., description="Main message text")


class InteractiveFooter(BaseModel):
    model_config = OUTGOING_MODEL_CONFIG

    text: str = Field(..., description="Footer text")


class InteractiveHeader(BaseModel):
    """Header for interactive messages with media support."""

    model_config = OUTGOING_MODEL_CONFIG

    type: Literal["text", "image", "video", "document"]
    text: str | None = None
    image: dict[str, str] | None = None
    video: dict[str, str] | None = None
    document: dict[str, str] | None = None


class InteractiveObject(BaseModel):
    """The ``interactive`` payload."""

    model_config = OUTGOING_MODEL_CONFIG

    type: InteractiveType
    header: InteractiveHeader | None = None
    body: InteractiveBody
    footer: InteractiveFooter | None = None
    action: dict[str, Any] = Field(
        ..., description="Buttons, sections, URL or flow parameters"
    )


class InteractiveMessage(OutgoingMessageBase):
    """Outgoing interactive message."""

    type: Literal["interactive"] = "interactive"
    interactive: InteractiveObject
