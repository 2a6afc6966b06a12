# web/services/identity.py
import logging
from typing import Any, ClassVar, Dict, Optional, Self

import httpx

from community_hub.config import Settings
from community_hub.db.schemas.identity import IdentityUser

logger = logging.getLogger("community_hub.identity")


class ClerkError(Exception):
    pass


class ClerkClient:
    """Thin async client for the identity provider's Backend API."""

    _instance: ClassVar[Optional["ClerkClient"]] = None

    def __new__(cls) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if getattr(self, "_initialized", False):
            return

        settings = Settings()
        self.base_url = settings.clerk_api_url
        self.secret_key = settings.clerk_secret_key
        self.timeout = settings.clerk_timeout
        self._initialized = True

    async def _request(self, method: str, path: str, json_body: Optional[Dict[str, Any]] = None) -> Any:
        if not self.secret_key:
            raise ClerkError("CLERK_SECRET_KEY is not set.")

        url = self.base_url + path
        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Accept": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                resp = await client.request(method, url, headers=headers, json=json_body)
            except httpx.RequestError as exc:
                raise ClerkError(f"Request error talking to Clerk: {exc}") from exc

        if resp.status_code >= 400:
            logger.warning("Clerk returned %s for %s %s", resp.status_code, method, path)
            raise ClerkError(f"Clerk returned {resp.status_code} for {method} {path}: {resp.text}")

        if not resp.content:
            return None
        return resp.json()

    async def get_user(self, user_id: str) -> IdentityUser:
        data = await self._request("GET", f"/users/{user_id}")
        return IdentityUser.model_validate(data)

    async def ban_user(self, user_id: str) -> None:
        await self._request("POST", f"/users/{user_id}/ban")

    async def unban_user(self, user_id: str) -> None:
        await self._request("POST", f"/users/{user_id}/unban")
