import enum
from dataclasses import dataclass

from fastapi import Header, HTTPException


class Role(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def get_current_user(
    x_user_id: int | None = Header(default=None, ge=1),
    x_user_role: Role = Header(default=Role.USER),
) -> CurrentUser:
    """Identity placed on the request by the authentication layer in front of us."""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return CurrentUser(id=x_user_id, role=x_user_role)
