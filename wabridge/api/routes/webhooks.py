"""
FastAPI router exposing a WebhookDispatcher.

Meta calls the same URL for verification (GET) and deliveries (POST); both are
forwarded to ``WebhookDispatcher.handle`` and answered as plain text.
"""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from wabridge.core.events import WebhookDispatcher, WebhookResponse
from wabridge.core.logging.logger import get_logger

logger = get_logger(__name__)


def _as_plain_text(response: WebhookResponse) -> PlainTextResponse:
    return PlainTextResponse(content=response.body, status_code=response.status)


def create_webhook_router(
    dispatcher: WebhookDispatcher, path: str = "/webhook"
) -> APIRouter:
    """
    Args:
        dispatcher: Dispatcher answering verification and deliveries
        path: URL registered as the callback in the Meta app dashboard
    """
    router = APIRouter(tags=["WhatsApp Webhook"])

    @router.get(path, response_class=PlainTextResponse)
    async def webhook_verification(request: Request):
        # hub.mode / hub.verify_token / hub.challenge
        response = await dispatcher.handle("GET", query=request.query_params)
        return _as_plain_text(response)

    @router.post(path, response_class=PlainTextResponse)
    async def webhook_delivery(request: Request):
        try:
            body = await request.json()
        except ValueError as e:
            logger.warning(f"Webhook body is not valid JSON: {e}")
            return PlainTextResponse(content="Invalid JSON payload", status_code=400)

        return _as_plain_text(await dispatcher.handle("POST", body=body))

    return router
