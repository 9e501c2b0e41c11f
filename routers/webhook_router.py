"""
Webhook Router - identity provider account lifecycle events
"""

import logging

from fastapi import APIRouter, Depends, Request

from auth import IdentityProvider, get_identity_provider
from crud.store import Store, get_store
from services.webhook_service import WebhookRejected, WebhookService, signature_headers
from utils.responses import error_response, success_response

logger = logging.getLogger(__name__)

webhook_router = APIRouter(prefix="/api/webhook", tags=["webhook"])


@webhook_router.post("/register")
async def register_webhook(
    request: Request,
    store: Store = Depends(get_store),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """
    Handle Clerk webhook deliveries signed by Svix.

    Rejections answer 400 so the provider retries the delivery.
    """
    try:
        headers = signature_headers(request.headers)
        body = await request.body()
        event_type = await WebhookService(store, provider).process(body, headers)
    except WebhookRejected as e:
        return error_response(e.message, status=400)
    except Exception as e:
        logger.error(f"Webhook error: {e}", exc_info=True)
        return error_response("Error occurred while processing webhook", status=400)

    return success_response({"eventType": event_type}, message="Webhook received Successfully")
