# web/routers/webhooks.py
import logging
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from community_hub.web.services.webhooks import ClerkWebhookService, WebhookVerificationError

logger = logging.getLogger("community_hub.webhooks")

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@router.post("/clerk", response_class=PlainTextResponse)
async def clerk_webhook(request: Request) -> str:
    service = ClerkWebhookService()
    body = await request.body()
    try:
        event = service.verify(request.headers, body)
    except WebhookVerificationError as exc:
        logger.warning("Rejected Clerk webhook: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid webhook signature") from exc

    # store failures propagate as 500 so the provider re-delivers
    await service.handle(event)
    return "OK"
