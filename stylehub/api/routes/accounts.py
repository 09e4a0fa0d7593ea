"""Registration, profiles, admin approval and admin analytics routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.api.auth import AdminDependency, CurrentUserDependency, StylerDependency
from stylehub.api.schemas import (
    PartnerInventoryOut,
    ProfileOut,
    RegisterRequest,
    StylerOut,
    StylerProfileUpdate,
    UserOut,
)
from stylehub.db import models
from stylehub.db.session import get_session
from stylehub.services.accounts import AccountService
from stylehub.services.admin_analytics import AdminAnalytics

router = APIRouter(prefix="/api", tags=["accounts"])


@router.post("/auth/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> dict:
    user = await AccountService().register(
        session,
        email=body.email,
        role=body.role,
        profile=body.model_dump(exclude={"email", "role"}, exclude_none=True),
    )
    if user.is_approved:
        message = f"{user.role.capitalize()} registered successfully. You can now log in."
    else:
        message = "User registered successfully. Waiting for admin approval."
    return {"message": message, "user": UserOut.from_model(user)}


@router.get("/auth/profile")
async def get_profile(user: models.User = CurrentUserDependency) -> dict:
    return {"user": ProfileOut.from_model(user).model_dump(by_alias=True, exclude_none=True)}


@router.patch("/styler/profile", response_model=StylerOut)
async def update_styler_profile(
    body: StylerProfileUpdate,
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
) -> StylerOut:
    styler = await AccountService().update_styler_profile(
        session,
        user_id=user.id,
        values=body.model_dump(exclude_unset=True),
    )
    return StylerOut.from_model(styler)


@router.get("/admin/users/pending", response_model=list[UserOut])
async def list_pending_users(
    _: models.User = AdminDependency,
    session: AsyncSession = Depends(get_session),
) -> list[UserOut]:
    return [UserOut.from_model(user) for user in await AccountService().pending(session)]


@router.post("/admin/users/{user_id}/approve", response_model=UserOut)
async def approve_user(
    user_id: int,
    _: models.User = AdminDependency,
    session: AsyncSession = Depends(get_session),
) -> UserOut:
    user = await AccountService().approve(session, user_id=user_id)
    return UserOut.from_model(user)


@router.post("/admin/users/{user_id}/reject")
async def reject_user(
    user_id: int,
    _: models.User = AdminDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    await AccountService().reject(session, user_id=user_id)
    return {"message": "User rejected and removed successfully"}


@router.get("/admin/analytics")
async def admin_analytics(
    _: models.User = AdminDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    overview = await AdminAnalytics().registrations(session)
    return overview.as_dict()


@router.get("/admin/partners/analytics")
async def partner_analytics(
    _: models.User = AdminDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    inventories = await AdminAnalytics().partner_inventories(session)
    return {
        "count": len(inventories),
        "partners": [PartnerInventoryOut.from_inventory(inventory) for inventory in inventories],
    }
