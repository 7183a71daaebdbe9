"""
Media message models for WhatsApp messaging.

Image, video, audio, document and sticker messages reference media either by
an uploaded media ``id`` or by a public ``link``.
"""

from typing import Literal

from pydantic import BaseModel, Field

from wabridge.messaging.whatsapp.models.base_models import (
    OUTGOING_MODEL_CONFIG,
    OutgoingMessageBase,
)


class MediaObject(BaseModel):
    """Media reference shared by all media message types."""

    model_config = OUTGOING_MODEL_CONFIG

    id: str | None = Field(None, description="Uploaded media ID")
    link: str | None = Field(None, description="Public http(s) URL of the media")
    caption: str | None = Field(
        None, description="Caption (image, video and document only)"
    )
    filename: str | None = Field(None, description="File name (document only)")


class ImageMessage(OutgoingMessageBase):
    type: Literal["image"] = "image"
    image: MediaObject


class VideoMessage(OutgoingMessageBase):
    type: Literal["video"] = "video"
    video: MediaObject


class AudioMessage(OutgoingMessageBase):
    type: Literal["audio"] = "audio"
    audio: MediaObject


class DocumentMessage(OutgoingMessageBase):
    type: Literal["document"] = "document"
    document: MediaObject


class StickerMessage(OutgoingMessageBase):
    type: Literal["sticker"] = "sticker"
    sticker: MediaObject
