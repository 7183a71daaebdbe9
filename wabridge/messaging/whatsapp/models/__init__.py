"""WhatsApp outgoing message models."""

from typing import Annotated, Any, Union

from pydantic import Field, TypeAdapter

from .base_models import OutgoingMessageBase, ReplyContext
from .basic_models import MessageResponse, TextBody, TextMessage
from .interactive_models import (
    InteractiveBody,
    InteractiveFooter,
    InteractiveHeader,
    InteractiveMessage,
    InteractiveObject,
)
from .media_models import (
    AudioMessage,
    DocumentMessage,
    ImageMessage,
    MediaObject,
    StickerMessage,
    VideoMessage,
)
from .specialized_models import ContactsMessage, LocationMessage, LocationObject
from .template_models import TemplateLanguage, TemplateMessage, TemplateObject

OutgoingMessage = Annotated[
    Union[
        TextMessage,
        ImageMessage,
        VideoMessage,
        AudioMessage,
        DocumentMessage,
        StickerMessage,
        InteractiveMessage,
        TemplateMessage,
        LocationMessage,
        ContactsMessage,
    ],
    Field(discriminator="type"),
]

_outgoing_adapter: TypeAdapter[OutgoingMessage] = TypeAdapter(OutgoingMessage)


def parse_outgoing(payload: dict[str, Any]) -> OutgoingMessageBase:
    """
    Parse a Cloud API message body back into its outgoing model.

    Args:
        payload: Dictionary produced by ``to_payload()`` (or its JSON form)

    Returns:
        The matching OutgoingMessage variant

    Raises:
        pydantic.ValidationError: If the payload matches no variant
    """
    return _outgoing_adapter.validate_python(payload)


__all__ = [
    "OutgoingMessage",
    "OutgoingMessageBase",
    "parse_outgoing",
    "ReplyContext",
    "MessageResponse",
    "TextBody",
    "TextMessage",
    "MediaObject",
    "ImageMessage",
    "VideoMessage",
    "AudioMessage",
    "DocumentMessage",
    "StickerMessage",
    "InteractiveBody",
    "InteractiveFooter",
    "InteractiveHeader",
    "InteractiveObject",
    "InteractiveMessage",
    "TemplateLanguage",
    "TemplateObject",
    "TemplateMessage",
    "LocationObject",
    "LocationMessage",
    "ContactsMessage",
]
