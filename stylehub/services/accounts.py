"""User registration, approval and styler profile maintenance."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.services.enums import Role, StylerGender
from stylehub.services.errors import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
    store_errors,
)

logger = logging.getLogger(__name__)

ADMIN_SLOT_ID = 1


class AccountService:
    """Facade over user, styler and partner records."""

    async def register(
        self,
        session: AsyncSession,
        *,
        email: str,
        role: str,
        profile: Mapping[str, Any] | None = None,
    ) -> models.User:
        """Create a user and its role record.

        Stylers are approved immediately, partners wait for an admin. The
        first admin approves itself by claiming the bootstrap slot; later
        admins wait for approval like partners.
        """

        profile = dict(profile or {})
        email = (email or "").strip().lower()
        missing = [name for name, value in (("email", email), ("role", role)) if not value]
        if missing:
            raise ValidationError.for_fields(missing)
        if role not in {r.value for r in Role}:
            raise ValidationError("Invalid role. Must be one of: styler, partner, admin", ["role"])

        with store_errors("look up user"):
            existing = await session.execute(select(models.User.id).where(models.User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError("User with this email already exists", ["email"])
        gender = profile.get("gender") or StylerGender.OTHER.value
        if role == Role.STYLER.value and gender not in {g.value for g in StylerGender}:
            raise ValidationError(f"Unsupported gender: {gender}", ["gender"])

        user = models.User(email=email, role=role, is_approved=role == Role.STYLER.value)
        session.add(user)
        name = profile.get("full_name") or email.split("@")[0]
        if role == Role.STYLER.value:
            user.styler = models.Styler(
                name=name,
                gender=gender,
                skin_tone=profile.get("skin_tone"),
                country=profile.get("country"),
            )
        elif role == Role.PARTNER.value:
            user.partner = models.Partner(
                name=name,
                email=email,
                phone=profile.get("phone") or "",
                location=profile.get("address") or "",
            )
        await self._commit(session, "register user")
        user_id = user.id

        if role == Role.ADMIN.value and await self.claim_first_admin(session, user_id):
            user = await self.get_user(session, user_id)
            user.is_approved = True
            await self._commit(session, "approve first admin")
            logger.info("User %s claimed the first admin slot", user_id)

        return await self.get_user(session, user_id)

    async def claim_first_admin(self, session: AsyncSession, user_id: int) -> bool:
        """Atomically take the singleton first-admin slot.

        The slot is a row with a fixed primary key, so of two concurrent
        claims exactly one insert succeeds. The insert runs in a savepoint;
        a lost claim rolls back only that savepoint and leaves objects
        already loaded in the session intact.
        """

        stmt = insert(models.AdminBootstrap).values(id=ADMIN_SLOT_ID, claimed_by=user_id)
        try:
            async with session.begin_nested():
                await session.execute(stmt)
        except IntegrityError:
            return False
        except SQLAlchemyError as exc:
            logger.error("First admin claim failed: %s", exc)
            raise UpstreamError("Failed to register admin.", detail=str(exc)) from exc
        await self._commit(session, "claim the first admin slot")
        return True

    async def approve(self, session: AsyncSession, *, user_id: int) -> models.User:
        user = await self.get_user(session, user_id)
        user.is_approved = True
        await self._commit(session, "approve user")
        logger.info("User %s approved", user_id)
        return user

    async def pending(self, session: AsyncSession) -> list[models.User]:
        with store_errors("list pending users"):
            result = await session.execute(
                select(models.User).where(models.User.is_approved.is_(False)).order_by(models.User.id)
            )
        return list(result.scalars().all())

    async def reject(self, session: AsyncSession, *, user_id: int) -> None:
        """Remove a pending account together with its role record."""

        user = await self.get_user(session, user_id)
        if user.is_approved:
            raise ValidationError("Cannot reject an already approved user")
        with store_errors("reject user"):
            await session.delete(user)
        await self._commit(session, "reject user")
        logger.info("User %s rejected", user_id)

    async def update_styler_profile(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        values: Mapping[str, Any],
    ) -> models.Styler:
        with store_errors("load styler profile"):
            styler = await session.get(models.Styler, user_id)
        if styler is None:
            raise NotFoundError("Styler profile not found")
        if "gender" in values:
            gender = values["gender"] or StylerGender.OTHER.value
            if gender not in {g.value for g in StylerGender}:
                raise ValidationError(f"Unsupported gender: {gender}", ["gender"])
            styler.gender = gender
        for name in ("name", "skin_tone", "country", "bio"):
            if name in values:
                setattr(styler, name, values[name])
        await self._commit(session, "update styler profile")
        return styler

    async def get_user(self, session: AsyncSession, user_id: int) -> models.User:
        with store_errors("load user"):
            user = await session.get(models.User, user_id, populate_existing=True)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def authenticate(self, session: AsyncSession, user_id: int | None) -> models.User:
        """Resolve the calling user; unknown callers and pending accounts are rejected."""

        if user_id is None:
            raise UnauthorizedError("Unauthorized")
        with store_errors("load user"):
            user = await session.get(models.User, user_id)
        if user is None:
            raise UnauthorizedError("Unauthorized")
        if not user.is_approved:
            raise ForbiddenError("Account is waiting for admin approval")
        return user

    @staticmethod
    async def _commit(session: AsyncSession, action: str) -> None:
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise UpstreamError(f"Failed to {action}.", detail=str(exc)) from exc
