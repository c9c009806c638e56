from typing import Optional

from fastapi import Header, HTTPException, status


# ---------------------------
# Current User DTO
# ---------------------------
class CurrentUser:
    def __init__(self, id: str, name: str, role: Optional[str], company_id: Optional[str]):
        self.id = id
        self.name = name
        self.role = role
        self.company_id = company_id


# ---------------------------
# Headers → CurrentUser
# ---------------------------
def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
    x_company_id: Optional[str] = Header(default=None),
) -> CurrentUser:
    """Identity forwarded by the auth proxy in front of the service."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return CurrentUser(
        id=x_user_id,
        name=x_user_name or x_user_id,
        role=x_user_role,
        company_id=x_company_id,
    )
