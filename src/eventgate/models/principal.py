"""Principal model - the authenticated caller."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from eventgate.models.enums import Role


class Principal(BaseModel):
    """An authenticated user as yielded by the identity provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    display_name: Optional[str] = None
    role: Role = Role.USER

    @property
    def is_moderator(self) -> bool:
        return self.role == Role.MODERATOR
