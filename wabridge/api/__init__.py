"""FastAPI integration for wabridge."""

from .routes import create_webhook_router

__all__ = ["create_webhook_router"]
