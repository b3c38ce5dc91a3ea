from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException
from starlette import status

ROLES = ("parent", "therapist")


@dataclass
class CurrentUser:
    id: str
    role: str
    name: str = ""


def get_current_user(
        x_user_id: Optional[str] = Header(None),
        x_user_role: Optional[str] = Header(None),
        x_user_name: Optional[str] = Header(None)
) -> CurrentUser:
    """Acting user as asserted by the authenticating gateway in front of this service"""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header"
        )
    if x_user_role not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="X-User-Role must be 'parent' or 'therapist'"
        )
    return CurrentUser(id=x_user_id, role=x_user_role, name=x_user_name or "")


def require_therapist(user: CurrentUser):
    if user.role != "therapist":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Therapist account required")
