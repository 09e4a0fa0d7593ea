"""Caller identification and role-gated route dependencies."""

from typing import Callable

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.db.session import get_session
from stylehub.services.accounts import AccountService
from stylehub.services.enums import Role
from stylehub.services.errors import ForbiddenError


async def get_current_user(
    x_user_id: int | None = Header(default=None, alias="X-User-Id"),
    session: AsyncSession = Depends(get_session),
) -> models.User:
    """
    Resolve the caller from the ``X-User-Id`` header.

    Token issuance happens in front of this service; the gateway forwards the
    authenticated user id.
    """

    return await AccountService().authenticate(session, x_user_id)


async def get_optional_user(
    x_user_id: int | None = Header(default=None, alias="X-User-Id"),
    session: AsyncSession = Depends(get_session),
) -> models.User | None:
    if x_user_id is None:
        return None
    return await AccountService().authenticate(session, x_user_id)


def require_role(*roles: Role) -> Callable[..., object]:
    """Build a dependency that admits only callers holding one of ``roles``."""

    allowed = {role.value for role in roles}

    async def _dependency(user: models.User = Depends(get_current_user)) -> models.User:
        if user.role not in allowed:
            names = " or ".join(sorted(allowed))
            raise ForbiddenError(f"{names.capitalize()} role required")
        return user

    return _dependency


StylerDependency = Depends(require_role(Role.STYLER))
PartnerDependency = Depends(require_role(Role.PARTNER))
AdminDependency = Depends(require_role(Role.ADMIN))
CurrentUserDependency = Depends(get_current_user)
OptionalUserDependency = Depends(get_optional_user)
