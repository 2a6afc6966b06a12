# web/routers/admin_users.py
import uuid
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from community_hub.db.schemas._base import ActionResult
from community_hub.web.routers.utils import require_clerk_id
from community_hub.web.services.moderation import ModerationService

router = APIRouter(prefix="/api/admin/users", tags=["admin"])


class BanRequest(BaseModel):
    reason: Optional[str] = None


@router.post("/{profile_id}/hide", response_model=ActionResult)
async def hide_user(profile_id: uuid.UUID, clerk_id: str = Depends(require_clerk_id)) -> ActionResult:
    return await ModerationService().hide_user(clerk_id, profile_id)


@router.post("/{profile_id}/unhide", response_model=ActionResult)
async def unhide_user(profile_id: uuid.UUID, clerk_id: str = Depends(require_clerk_id)) -> ActionResult:
    return await ModerationService().unhide_user(clerk_id, profile_id)


@router.post("/{profile_id}/ban", response_model=ActionResult)
async def ban_user(profile_id: uuid.UUID, payload: Optional[BanRequest] = None, clerk_id: str = Depends(require_clerk_id)) -> ActionResult:
    reason = payload.reason if payload is not None else None
    return await ModerationService().ban_user(clerk_id, profile_id, reason)


@router.post("/{profile_id}/unban", response_model=ActionResult)
async def unban_user(profile_id: uuid.UUID, clerk_id: str = Depends(require_clerk_id)) -> ActionResult:
    return await ModerationService().unban_user(clerk_id, profile_id)
