"""
Shared enums for the WhatsApp Business webhook and messaging layers.

These values mirror the tags used on the wire by the WhatsApp Cloud API so
they can be compared directly against raw payload fields.
"""

from enum import Enum

# Top-level ``object`` tag of every WhatsApp Business webhook delivery
WHATSAPP_OBJECT_TAG = "whatsapp_business_account"

# Subscribed change field that carries inbound messages and statuses
MESSAGES_FIELD = "messages"

# Acknowledgment body returned for every accepted delivery
EVENT_RECEIVED = "EVENT_RECEIVED"

# Provider limits
MAX_TEXT_LENGTH = 4096
MAX_CAPTION_LENGTH = 1024
MAX_BUTTONS = 3
MAX_BUTTON_TITLE_LENGTH = 20
MAX_LIST_SECTIONS = 10
MAX_LIST_ROWS = 10


class MessageType(str, Enum):
    """Message type tags used by WhatsApp for inbound and outbound messages."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    STICKER = "sticker"
    LOCATION = "location"
    CONTACTS = "contacts"
    INTERACTIVE = "interactive"
    BUTTON = "button"  # Template quick reply buttons
    REACTION = "reaction"
    TEMPLATE = "template"  # Outbound only
    UNKNOWN = "unknown"

    @classmethod
    def from_tag(cls, tag: str | None) -> "MessageType":
        """Resolve a raw ``type`` tag, falling back to UNKNOWN for new tags."""
        try:
            return cls(tag)
        except ValueError:
            return cls.UNKNOWN


# Inbound types whose payload is a media object
MEDIA_MESSAGE_TYPES = frozenset(
    {
        MessageType.IMAGE,
        MessageType.AUDIO,
        MessageType.VIDEO,
        MessageType.DOCUMENT,
        MessageType.STICKER,
    }
)


class InteractiveReplyType(str, Enum):
    """Sub-types of inbound interactive replies."""

    BUTTON_REPLY = "button_reply"
    LIST_REPLY = "list_reply"
    NFM_REPLY = "nfm_reply"  # WhatsApp Flows response


class InteractiveType(str, Enum):
    """Sub-types of outbound interactive messages."""

    BUTTON = "button"
    LIST = "list"
    CTA_URL = "cta_url"
    FLOW = "flow"


class HandlerCategory(str, Enum):
    """Routing keys used by the webhook dispatcher to pick a callback."""

    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    LOCATION = "location"
    STICKER = "sticker"
    CONTACT = "contact"
    REACTION = "reaction"
    BUTTON_CLICK = "button_click"
    LIST_SELECT = "list_select"
    FLOW_RESPONSE = "flow_response"
    UNKNOWN = "unknown"
    STATUS = "status"
    ERROR = "error"


class MessageStatus(str, Enum):
    """Delivery status values reported for outbound messages."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"
    DELETED = "deleted"
    WARNING = "warning"


class ErrorKind(str, Enum):
    """Discriminant carried by every library error."""

    CONFIGURATION = "configuration_error"
    VALIDATION = "validation_error"
    NORMALIZATION = "normalization_error"
    VERIFICATION = "verification_error"
    HANDLER = "handler_error"
    API = "api_error"
    RATE_LIMIT = "rate_limit_error"
