"""Derived styler attributes used to personalise suggestions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.services.errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Profile:
    """Attributes recomputed from user records on every request."""

    gender: str | None = None
    skin_tone: str | None = None
    occasion_types: frozenset[str] = field(default_factory=frozenset)


class ProfileResolver:
    """Read-through lookup of a user's gender, skin tone and planned occasion types."""

    async def resolve(self, session: AsyncSession, user_id: int) -> Profile:
        try:
            styler = await session.get(models.Styler, user_id)
            result = await session.execute(
                select(models.Occasion.type)
                .where(models.Occasion.user_id == user_id)
                .distinct()
            )
            occasion_types = frozenset(value for value in result.scalars().all() if value)
        except SQLAlchemyError as exc:
            logger.error("Failed to resolve profile for user %s: %s", user_id, exc)
            raise UpstreamError("Failed to load user profile.", detail=str(exc)) from exc

        if styler is None:
            return Profile(occasion_types=occasion_types)
        return Profile(
            gender=styler.gender or None,
            skin_tone=styler.skin_tone or None,
            occasion_types=occasion_types,
        )
