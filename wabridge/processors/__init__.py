"""Webhook processors for wabridge."""

from .whatsapp_processor import WhatsAppMessageNormalizer, normalize

__all__ = ["WhatsAppMessageNormalizer", "normalize"]
