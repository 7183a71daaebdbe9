"""API routes for wabridge."""

from .webhooks import create_webhook_router

__all__ = ["create_webhook_router"]
