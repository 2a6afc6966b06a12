from typing import Optional
from fastapi import HTTPException, Request, status


def current_clerk_id(request: Request) -> Optional[str]:
    return getattr(request.state, "clerk_id", None)


def require_clerk_id(request: Request) -> str:
    clerk_id = current_clerk_id(request)
    if not clerk_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return clerk_id
