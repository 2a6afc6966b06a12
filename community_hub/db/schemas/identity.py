from typing import Optional
from pydantic import BaseModel, ConfigDict

DEFAULT_DISPLAY_NAME = "User"


class IdentityUser(BaseModel):
    """
    The subset of an identity-provider user needed to provision a profile.

    Field names follow the provider's JSON (``first_name``, ``image_url``…), so both
    the Backend API response and the ``user.created`` webhook payload validate directly.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    image_url: Optional[str] = None
    has_image: bool = False

    @property
    def display_name(self) -> str:
        full = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full or self.username or DEFAULT_DISPLAY_NAME

    @property
    def avatar_url(self) -> Optional[str]:
        return self.image_url if self.has_image else None
