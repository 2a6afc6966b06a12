# web/services/webhooks.py
import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any, ClassVar, Mapping, Optional, Self

from community_hub.config import Settings
from community_hub.db.database import DataBase
from community_hub.db.schemas.identity import IdentityUser
from community_hub.web.services.profile import ProfileService

logger = logging.getLogger("community_hub.webhooks")

TIMESTAMP_TOLERANCE_SECONDS = 5 * 60


class WebhookVerificationError(ValueError):
    pass


def _secret_bytes(secret: str) -> bytes:
    if secret.startswith("whsec_"):
        secret = secret[len("whsec_"):]
    return base64.b64decode(secret)


def sign_payload(secret: str, msg_id: str, timestamp: str, body: str) -> str:
    """Signature in the ``v1,<base64>`` form the provider puts in ``svix-signature``."""
    signed = f"{msg_id}.{timestamp}.{body}".encode("utf-8")
    digest = hmac.new(_secret_bytes(secret), signed, hashlib.sha256).digest()
    return "v1," + base64.b64encode(digest).decode("ascii")


def verify_webhook(
    secret: Optional[str],
    headers: Mapping[str, str],
    body: bytes,
    now: Optional[float] = None,
) -> dict[str, Any]:
    """
    Check the Svix signature headers of an incoming webhook and return the decoded event.

    Raises:
        WebhookVerificationError: missing secret or headers, stale timestamp, bad signature
            or a body that is not UTF-8 or not a JSON object.
    """
    if not secret:
        raise WebhookVerificationError("CLERK_WEBHOOK_SECRET is not set.")

    msg_id = headers.get("svix-id")
    timestamp = headers.get("svix-timestamp")
    signatures = headers.get("svix-signature")
    if not msg_id or not timestamp or not signatures:
        raise WebhookVerificationError("Missing svix headers.")

    try:
        sent_at = int(timestamp)
    except ValueError as exc:
        raise WebhookVerificationError("Invalid svix-timestamp.") from exc
    now = time.time() if now is None else now
    if abs(now - sent_at) > TIMESTAMP_TOLERANCE_SECONDS:
        raise WebhookVerificationError("Webhook timestamp is outside the tolerance window.")

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise WebhookVerificationError("Body is not valid UTF-8.") from exc
    expected = sign_payload(secret, msg_id, timestamp, text)
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures.split()):
        raise WebhookVerificationError("No matching signature.")

    try:
        event = json.loads(text)
    except json.JSONDecodeError as exc:
        raise WebhookVerificationError("Body is not valid JSON.") from exc
    if not isinstance(event, dict):
        raise WebhookVerificationError("Body is not a JSON object.")
    return event


class ClerkWebhookService:
    """Reacts to identity-provider user lifecycle events."""

    _instance: ClassVar[Optional["ClerkWebhookService"]] = None

    def __new__(cls) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if getattr(self, "_initialized", False):
            return

        self._initialized = True

    @property
    def _database(self) -> DataBase:
        return DataBase()

    def verify(self, headers: Mapping[str, str], body: bytes) -> dict[str, Any]:
        return verify_webhook(Settings().clerk_webhook_secret, headers, body)

    async def handle(self, event: Mapping[str, Any]) -> None:
        event_type = event.get("type")
        data = event.get("data") or {}

        match event_type:
            case "user.created":
                await self.on_user_created(data)
            case "user.deleted":
                await self.on_user_deleted(data)
            case _:
                logger.debug("Ignoring webhook event %s", event_type)

    async def on_user_created(self, data: Mapping[str, Any]) -> None:
        identity = IdentityUser.model_validate(data)
        await ProfileService().ensure_profile(identity.id, identity)

    async def on_user_deleted(self, data: Mapping[str, Any]) -> None:
        clerk_id = data.get("id")
        profile = await self._database.get_profile_by_clerk_id(clerk_id)
        if profile is None:
            # the user never finished provisioning
            logger.info("user.deleted for %s: no profile, nothing to do", clerk_id)
            return

        await self._database.delete_profile_cascade(profile.id)
        logger.info("user.deleted for %s: removed profile %s and its data", clerk_id, profile.id)
