from .base import FrozenModel
from .enum import UserRole
from .id import UserID


class Identity(FrozenModel):
    """The authenticated principal behind one or more connections."""

    user_id: UserID
    role: UserRole
    display_name: str


class IdentityRecord(Identity):
    """Directory view of an identity, including account state."""

    is_active: bool = True

    def to_identity(self) -> Identity:
        return Identity(user_id=self.user_id, role=self.role, display_name=self.display_name)
