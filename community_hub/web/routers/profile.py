# web/routers/profile.py
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from community_hub.db.schemas._base import ActionResult
from community_hub.db.schemas.profile import ProfileRead
from community_hub.web.routers.utils import current_clerk_id
from community_hub.web.services.profile import ProfileService

router = APIRouter(prefix="/api/profile", tags=["profile"])


class UsernameClaim(BaseModel):
    username: str


@router.get("/me", response_model=Optional[ProfileRead])
async def read_current_profile(clerk_id: Optional[str] = Depends(current_clerk_id)) -> Optional[ProfileRead]:
    # signed-out callers (and failed provisioning) read as null
    return await ProfileService().get_profile(clerk_id)


@router.post("/username", response_model=ActionResult)
async def claim_username(payload: UsernameClaim, clerk_id: Optional[str] = Depends(current_clerk_id)) -> ActionResult:
    return await ProfileService().claim_username(clerk_id, payload.username)
