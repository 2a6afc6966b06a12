# web/middlewares/profile.py
import logging
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from community_hub.config import Settings
from community_hub.web.services.audit_log import audit_logger
from community_hub.web.services.profile import ProfileService

logger = logging.getLogger("community_hub.profile")


def _profile_id_from_cookie(value: Optional[str], clerk_id: str) -> Optional[uuid.UUID]:
    if not value or not value.startswith(f"{clerk_id}:"):
        return None
    try:
        return uuid.UUID(value.split(":", 1)[1])
    except ValueError:
        return None


class ProfileMiddleware(BaseHTTPMiddleware):
    """
    Makes sure a signed-in caller has a profile, once per browser.

    The upstream auth layer puts the identity-provider user id in the header named by
    ``IDENTITY_HEADER``. The first request of a browser provisions the profile and drops
    a ``<clerk_id>:<profile_id>`` cookie; later requests trust the cookie and skip the
    lookup. A failed provisioning never blocks the request: no cookie is set, so the
    next request tries again.

    ``request.state.profile_id`` may come straight from the cookie and is not checked
    against the store. The audit actor is bound from the header identity instead.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = Settings()
        clerk_id = request.headers.get(settings.identity_header) or None
        request.state.clerk_id = clerk_id
        request.state.profile_id = None

        new_cookie: Optional[str] = None
        if clerk_id:
            profile_id = _profile_id_from_cookie(request.cookies.get(settings.profile_cookie), clerk_id)
            if profile_id is None:
                try:
                    profile = await ProfileService().ensure_profile(clerk_id)
                except Exception:
                    logger.exception("ensure-profile failed for %s", clerk_id)
                    profile = None
                if profile is not None:
                    profile_id = profile.id
                    new_cookie = f"{clerk_id}:{profile.id}"
            request.state.profile_id = profile_id

        token = audit_logger.bind_actor(clerk_id)
        try:
            response = await call_next(request)
        finally:
            audit_logger.unbind_actor(token)

        if new_cookie is not None:
            response.set_cookie(
                settings.profile_cookie,
                new_cookie,
                max_age=settings.profile_cookie_max_age,
                httponly=True,
                secure=settings.is_production,
                samesite="lax",
            )
        return response
