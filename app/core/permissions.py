from fastapi import Depends, HTTPException, status

from app.core.security import get_current_user
from app.models.user import User


class RoleRequired:
    def __init__(self, *roles: str):
        self.roles = roles

    async def __call__(self, user: User = Depends(get_current_user)):
        if user.role not in self.roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access restricted to {', '.join(self.roles)} accounts."
            )
        return user


user_only = RoleRequired("user")
