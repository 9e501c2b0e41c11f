"""
Webhook Service - provisions local users from identity provider events
"""

import json
import logging
from typing import Mapping

from pydantic import ValidationError
from svix.webhooks import WebhookVerificationError

from auth import IdentityProvider
from crud.store import Store
from models.webhook import UserCreatedData, WebhookEvent

logger = logging.getLogger(__name__)

SVIX_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


class WebhookRejected(Exception):
    """Raised when a delivery is refused; the router answers 400."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def signature_headers(headers: Mapping[str, str]) -> dict:
    """
    Collect the three Svix headers. Raises WebhookRejected if any is missing,
    before the body is ever looked at.
    """
    collected = {name: headers.get(name) for name in SVIX_HEADERS}
    if not all(collected.values()):
        raise WebhookRejected("No svix headers found")
    return collected


class WebhookService:
    """
    Verifies identity-provider deliveries and materializes users.
    Nothing in the payload is trusted until the signature checks out.
    """

    def __init__(self, store: Store, identity_provider: IdentityProvider):
        self.store = store
        self.identity_provider = identity_provider

    def verify(self, body: bytes, headers: dict) -> WebhookEvent:
        try:
            self.identity_provider.verify_webhook_signature(body, headers)
        except (WebhookVerificationError, ValueError) as e:
            logger.warning(f"Error verifying webhooks: {e}")
            raise WebhookRejected("Error occurred while verifying webhooks")

        # Decode the event from the bytes that were signed
        try:
            return WebhookEvent.model_validate(json.loads(body))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Malformed webhook event: {e}")
            raise WebhookRejected("Error occurred while verifying webhooks")

    async def process(self, body: bytes, headers: dict) -> str:
        """
        Verify and handle one delivery.

        Returns:
            The verified event type
        """
        event = self.verify(body, headers)

        if event.type == "user.created":
            await self.handle_user_created(event)
        else:
            logger.info(f"Ignoring webhook event {event.type}")
        return event.type

    async def handle_user_created(self, event: WebhookEvent) -> None:
        try:
            data = UserCreatedData.model_validate(event.data)
        except ValidationError as e:
            logger.warning(f"Error creating user: {e}")
            raise WebhookRejected("Error occurred while creating user")

        email = data.primary_email()
        if email is None:
            raise WebhookRejected("Primary email not found")

        try:
            user = await self.store.create_user(data.id, email)
        except Exception as e:
            logger.error(f"Error creating user: {e}", exc_info=True)
            raise WebhookRejected("Error occurred while creating user")

        if user is None:
            raise WebhookRejected("User not created")
        logger.info(f"Provisioned user {data.id}")
