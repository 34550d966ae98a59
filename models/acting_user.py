from pydantic import BaseModel, ConfigDict

from models.user_role import UserRole


class ActingUser(BaseModel):
    """Identity asserted by the authentication gateway for the current request."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
