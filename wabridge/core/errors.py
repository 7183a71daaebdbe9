"""
Error model for wabridge.

Every error carries an ``ErrorKind`` discriminant so callers can branch on
``error.kind`` instead of walking the class hierarchy. The hierarchy itself is
kept shallow: ``RateLimitError`` is the only specialisation of another kind.

Propagation rules:
- ConfigurationError and VerificationError are raised to the caller.
- MessageValidationError carries every violation found for one build call.
- NormalizationError is returned as data by the normalizer, never raised.
- HandlerError is created by the dispatcher and passed to the error handler.
- ApiError / RateLimitError are raised by the transport client.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from wabridge.core.types import ErrorKind, HandlerCategory

if TYPE_CHECKING:
    from wabridge.schemas.whatsapp.processed import ProcessedIncomingMessage


class WhatsAppError(Exception):
    """Base class for all wabridge errors."""

    kind: ErrorKind

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary for logging."""
        return {"kind": self.kind.value, "message": self.message}


class ConfigurationError(WhatsAppError):
    """Required setup is missing (verify token, access token, ...)."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, missing_fields: list[str] | None = None):
        self.missing_fields = list(missing_fields or [])
        if self.missing_fields:
            message = f"{message}. Missing: {', '.join(self.missing_fields)}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "missing_fields": self.missing_fields}


class FieldViolation(BaseModel):
    """A single builder rule violation."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Dotted path of the offending field")
    message: str = Field(..., description="Human readable explanation")


class MessageValidationError(WhatsAppError):
    """
    An outgoing message failed one or more builder rules.

    All violations for a single build call are collected before raising, so
    ``violations`` is the complete report for that call.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, violations: list[FieldViolation]):
        self.violations = list(violations)
        summary = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(f"Invalid outgoing message ({summary})")

    @property
    def fields(self) -> list[str]:
        """Dotted paths of every offending field, in discovery order."""
        return [v.field for v in self.violations]

    @property
    def field(self) -> str | None:
        """The first offending field."""
        return self.violations[0].field if self.violations else None

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "violations": [v.model_dump() for v in self.violations],
        }


class NormalizationError(WhatsAppError):
    """A single inbound message (or status) could not be normalized."""

    kind = ErrorKind.NORMALIZATION

    def __init__(
        self,
        reason: str,
        *,
        entry_index: int,
        change_index: int,
        message_index: int | None = None,
        message_id: str | None = None,
        raw: Any = None,
    ):
        self.reason = reason
        self.entry_index = entry_index
        self.change_index = change_index
        self.message_index = message_index
        self.message_id = message_id
        self.raw = raw
        location = f"entry[{entry_index}].changes[{change_index}]"
        if message_index is None:
            # The change value itself is malformed
            super().__init__(f"Malformed change at {location}: {reason}")
        else:
            super().__init__(
                f"Malformed message {message_id or '<no id>'} at {location} "
                f"#{message_index}: {reason}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "reason": self.reason,
            "entry_index": self.entry_index,
            "change_index": self.change_index,
            "message_index": self.message_index,
            "message_id": self.message_id,
        }


class VerificationError(WhatsAppError):
    """The webhook verification challenge did not match."""

    kind = ErrorKind.VERIFICATION

    def __init__(self, message: str = "Webhook verification failed"):
        super().__init__(message)


class HandlerError(WhatsAppError):
    """A user-supplied handler raised while processing a message."""

    kind = ErrorKind.HANDLER

    def __init__(
        self,
        category: HandlerCategory,
        original: BaseException,
        message: "ProcessedIncomingMessage | None" = None,
    ):
        self.category = category
        self.original = original
        self.incoming_message = message
        message_id = message.id if message is not None else None
        super().__init__(
            f"Handler for '{category.value}' failed on message "
            f"{message_id or '<none>'}: {original!r}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "category": self.category.value,
            "message_id": self.incoming_message.id
            if self.incoming_message is not None
            else None,
            "original": repr(self.original),
        }


def _header(headers: Mapping[str, str] | None, name: str) -> str | None:
    """Case-insensitive header lookup for plain dicts and CIMultiDicts alike."""
    if not headers:
        return None
    wanted = name.lower()
    return next((v for k, v in headers.items() if k.lower() == wanted), None)


class ApiError(WhatsAppError):
    """The Graph API rejected a request."""

    kind = ErrorKind.API

    def __init__(
        self,
        message: str,
        *,
        status: int = 400,
        code: int = 0,
        type: str = "unknown",
        details: str = "No details provided",
        fbtrace_id: str | None = None,
    ):
        self.status = status
        self.code = code
        self.type = type
        self.details = details
        self.fbtrace_id = fbtrace_id
        super().__init__(message)

    @classmethod
    def from_response(
        cls,
        status: int,
        body: dict[str, Any] | None,
        headers: Mapping[str, str] | None = None,
    ) -> "ApiError":
        """
        Build the matching error from a Graph API error response.

        Args:
            status: HTTP status code
            body: Decoded JSON body, usually ``{"error": {...}}``
            headers: Response headers (used for ``Retry-After``, any casing)

        Returns:
            RateLimitError for HTTP 429, ApiError otherwise
        """
        error = (body or {}).get("error") or {}
        error_data = error.get("error_data") or {}
        kwargs = {
            "status": status,
            "code": error.get("code") or 0,
            "type": error.get("type") or "unknown",
            "details": error_data.get("details") or "No details provided",
            "fbtrace_id": error.get("fbtrace_id"),
        }
        message = error.get("message") or f"WhatsApp API request failed ({status})"

        if status == 429:
            retry_after = None
            raw_retry = _header(headers, "Retry-After")
            if raw_retry and str(raw_retry).isdigit():
                retry_after = int(raw_retry)
            return RateLimitError(message, retry_after=retry_after, **kwargs)

        return cls(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "status": self.status,
            "code": self.code,
            "type": self.type,
            "details": self.details,
            "fbtrace_id": self.fbtrace_id,
        }


class RateLimitError(ApiError):
    """The Graph API throttled the request (HTTP 429)."""

    kind = ErrorKind.RATE_LIMIT

    def __init__(self, message: str, *, retry_after: int | None = None, **kwargs):
        kwargs.setdefault("status", 429)
        self.retry_after = retry_after
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "retry_after": self.retry_after}
