"""Request dependencies — who is asking, and may they."""

from fastapi import Depends, HTTPException

from fleet.identity import Role, User, get_identity_provider
from fleet.utils.logging import bind_viewer

OPERATOR_ROLES = {Role.ADMIN, Role.SALES}


async def require_viewer() -> User:
    """The signed-in user; there is no implicit default role."""
    user = get_identity_provider().current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Sign-in required")
    bind_viewer(user)
    return user


def require_role(*roles: Role):
    allowed = set(roles)

    async def dependency(viewer: User = Depends(require_viewer)) -> User:
        if viewer.role not in allowed:
            raise HTTPException(status_code=403, detail=f"Role `{viewer.role.value}` may not perform this action")
        return viewer

    return dependency
