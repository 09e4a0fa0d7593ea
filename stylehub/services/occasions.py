"""Occasion planning: CRUD scoped to the owning styler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.services.enums import OwnerKind
from stylehub.services.errors import NotFoundError, UpstreamError, ValidationError, store_errors

logger = logging.getLogger(__name__)

OCCASION_NOT_FOUND = "Occasion not found"

_UNSET: Any = object()


@dataclass(slots=True)
class OccasionDraft:
    """Field values supplied by the caller; ``_UNSET`` leaves a field untouched on update."""

    title: Any = _UNSET
    type: Any = _UNSET
    date: Any = _UNSET
    location: Any = _UNSET
    dress_code: Any = _UNSET
    notes: Any = _UNSET
    skin_tone: Any = _UNSET
    garment_ids: Any = _UNSET

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> "OccasionDraft":
        known = {item.name for item in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in known})

    def provided(self, name: str) -> bool:
        return getattr(self, name) is not _UNSET


class OccasionService:
    """Create, read, update and delete occasions of a single owner."""

    async def create(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        draft: OccasionDraft,
    ) -> models.Occasion:
        missing = [
            name
            for name in ("title", "date")
            if not draft.provided(name) or not getattr(draft, name)
        ]
        if missing:
            raise ValidationError.for_fields(missing)

        occasion = models.Occasion(
            user_id=user_id,
            title=draft.title,
            type=(draft.type if draft.provided("type") and draft.type else "other"),
            date=self._as_datetime(draft.date),
        )
        for name in ("location", "dress_code", "notes", "skin_tone"):
            if draft.provided(name):
                setattr(occasion, name, getattr(draft, name))
        if draft.provided("garment_ids") and draft.garment_ids:
            occasion.garment_links = await self._links(session, user_id, draft.garment_ids)

        session.add(occasion)
        await self._commit(session, "create occasion")
        return await self.get(session, user_id=user_id, occasion_id=occasion.id)

    async def list_for_user(self, session: AsyncSession, *, user_id: int) -> Sequence[models.Occasion]:
        stmt = (
            select(models.Occasion)
            .where(models.Occasion.user_id == user_id)
            .order_by(models.Occasion.date.desc(), models.Occasion.id.desc())
        )
        with store_errors("list occasions"):
            result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        occasion_id: int,
    ) -> models.Occasion:
        """Return the occasion if it exists and belongs to ``user_id``.

        A foreign occasion raises the same :class:`NotFoundError` as a missing
        one so callers cannot discover other users' occasions.
        """

        stmt = (
            select(models.Occasion)
            .where(
                models.Occasion.id == occasion_id,
                models.Occasion.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        with store_errors("load occasion"):
            result = await session.execute(stmt)
        occasion = result.scalar_one_or_none()
        if occasion is None:
            raise NotFoundError(OCCASION_NOT_FOUND)
        return occasion

    async def update(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        occasion_id: int,
        draft: OccasionDraft,
    ) -> models.Occasion:
        occasion = await self.get(session, user_id=user_id, occasion_id=occasion_id)

        if draft.provided("title"):
            if not draft.title:
                raise ValidationError.for_fields(["title"])
            occasion.title = draft.title
        if draft.provided("date"):
            if not draft.date:
                raise ValidationError.for_fields(["date"])
            occasion.date = self._as_datetime(draft.date)
        if draft.provided("type"):
            occasion.type = draft.type or "other"
        for name in ("location", "dress_code", "notes", "skin_tone"):
            if draft.provided(name):
                setattr(occasion, name, getattr(draft, name))
        if draft.provided("garment_ids"):
            occasion.garment_links = await self._links(session, user_id, draft.garment_ids or [])

        await self._commit(session, "update occasion")
        return await self.get(session, user_id=user_id, occasion_id=occasion_id)

    async def delete(self, session: AsyncSession, *, user_id: int, occasion_id: int) -> None:
        occasion = await self.get(session, user_id=user_id, occasion_id=occasion_id)
        with store_errors("delete occasion"):
            await session.delete(occasion)
        await self._commit(session, "delete occasion")

    async def _links(
        self,
        session: AsyncSession,
        user_id: int,
        garment_ids: Sequence[int],
    ) -> list[models.OccasionGarment]:
        """Build ordered links, rejecting garments outside the styler's wardrobe."""

        unique_ids = list(dict.fromkeys(garment_ids))
        stmt = select(models.Garment).where(
            models.Garment.id.in_(unique_ids),
            models.Garment.owner_id == user_id,
            models.Garment.owner_kind == OwnerKind.STYLER.value,
        )
        with store_errors("load garments"):
            owned = {garment.id: garment for garment in (await session.execute(stmt)).scalars()}
        unknown = [str(garment_id) for garment_id in unique_ids if garment_id not in owned]
        if unknown:
            raise ValidationError(
                f"Unknown garments in clothesList: {', '.join(unknown)}",
                ["clothesList"],
            )
        return [
            models.OccasionGarment(garment=owned[garment_id], position=position)
            for position, garment_id in enumerate(unique_ids)
        ]

    @staticmethod
    def _as_datetime(value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value))
        except ValueError as exc:
            raise ValidationError.for_fields(["date"], reason="malformed") from exc

    @staticmethod
    async def _commit(session: AsyncSession, action: str) -> None:
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise UpstreamError(f"Failed to {action}.", detail=str(exc)) from exc
