from typing import Annotated

from fastapi import Depends, Header

from exceptions import ForbiddenError, UnauthorizedError
from models.acting_user import ActingUser
from models.user_role import UserRole


async def get_acting_user(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> ActingUser:
    """
    Identity asserted by the authenticating gateway in front of this service.

    Credentials are verified upstream; here the headers are trusted as-is.
    """
    if not x_user_id:
        raise UnauthorizedError('Authentication required')

    try:
        role = UserRole(x_user_role or UserRole.USER)
    except ValueError:
        raise UnauthorizedError(f'Unknown role {x_user_role!r}') from None

    return ActingUser(id=x_user_id, role=role)


CurrentUser = Annotated[ActingUser, Depends(get_acting_user)]


async def require_admin(user: CurrentUser) -> ActingUser:
    if not user.is_admin:
        raise ForbiddenError('Admin access required')
    return user


AdminUser = Annotated[ActingUser, Depends(require_admin)]
