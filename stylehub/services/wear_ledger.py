"""Append-only record of garments being worn."""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from typing import NamedTuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.metrics.prometheus_exporter import wear_events_total
from stylehub.services.enums import OwnerKind, WearDedupPolicy
from stylehub.services.errors import NotFoundError, UpstreamError, store_errors

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps (as returned by SQLite) as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RecordedWear(NamedTuple):
    event: models.WearEvent
    # False when the dedup policy returned an existing event
    created: bool


class WearLedger:
    """Records wear events and answers last-worn questions.

    Events are never updated or deleted. The garment ``usage_count`` column is
    a denormalised counter kept in step with the ledger by an atomic increment;
    :meth:`reconcile_usage_counts` rebuilds it from the ledger when the two
    drift apart.
    """

    def __init__(self, policy: WearDedupPolicy = WearDedupPolicy.ALLOW) -> None:
        self._policy = policy

    async def record(
        self,
        session: AsyncSession,
        *,
        garment_id: int,
        user_id: int,
        color: str | None = None,
        category: str | None = None,
        worn_at: datetime | None = None,
    ) -> RecordedWear:
        """Append one wear event and bump the garment usage counter."""

        with store_errors("load garment"):
            garment = await session.get(models.Garment, garment_id)
        if (
            garment is None
            or garment.owner_id != user_id
            or garment.owner_kind != OwnerKind.STYLER.value
        ):
            raise NotFoundError("Garment not found")

        worn_at = as_utc(worn_at) if worn_at else datetime.now(timezone.utc)

        if self._policy is WearDedupPolicy.ONE_PER_DAY:
            existing = await self._same_day_event(session, garment_id, user_id, worn_at)
            if existing is not None:
                logger.info(
                    "Skipping duplicate wear of garment %s by user %s on %s",
                    garment_id,
                    user_id,
                    worn_at.date(),
                )
                return RecordedWear(existing, created=False)

        event = models.WearEvent(
            garment_id=garment_id,
            user_id=user_id,
            worn_at=worn_at,
            color=color or garment.color,
            category=category or garment.category,
        )
        session.add(event)
        try:
            await session.flush()
            await session.execute(
                update(models.Garment)
                .where(models.Garment.id == garment_id)
                .values(usage_count=models.Garment.usage_count + 1)
            )
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Failed to record wear of garment %s: %s", garment_id, exc)
            raise UpstreamError("Failed to record wear.", detail=str(exc)) from exc

        wear_events_total.inc()
        with store_errors("reload garment"):
            await session.refresh(garment)
        return RecordedWear(event, created=True)

    async def _same_day_event(
        self,
        session: AsyncSession,
        garment_id: int,
        user_id: int,
        worn_at: datetime,
    ) -> models.WearEvent | None:
        day_start = datetime.combine(worn_at.date(), time.min, tzinfo=timezone.utc)
        stmt = (
            select(models.WearEvent)
            .where(
                models.WearEvent.garment_id == garment_id,
                models.WearEvent.user_id == user_id,
                models.WearEvent.worn_at >= day_start,
                models.WearEvent.worn_at < day_start + timedelta(days=1),
            )
            .order_by(models.WearEvent.worn_at.asc())
            .limit(1)
        )
        with store_errors("look up same-day wear"):
            result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def last_worn_map(self, session: AsyncSession, user_id: int) -> dict[int, datetime]:
        """Return the latest ``worn_at`` per garment for the user's events."""

        stmt = (
            select(models.WearEvent.garment_id, func.max(models.WearEvent.worn_at))
            .where(models.WearEvent.user_id == user_id)
            .group_by(models.WearEvent.garment_id)
        )
        try:
            result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("Last-worn aggregation failed for user %s: %s", user_id, exc)
            raise UpstreamError("Failed to aggregate wear history.", detail=str(exc)) from exc
        return {garment_id: as_utc(last_worn) for garment_id, last_worn in result.all()}

    async def history(
        self,
        session: AsyncSession,
        user_id: int,
        *,
        limit: int = 50,
    ) -> list[models.WearEvent]:
        """Return the user's most recent wear events."""

        stmt = (
            select(models.WearEvent)
            .where(models.WearEvent.user_id == user_id)
            .order_by(models.WearEvent.worn_at.desc(), models.WearEvent.id.desc())
            .limit(limit)
        )
        with store_errors("load wear history"):
            result = await session.execute(stmt)
        return list(result.scalars().all())

    async def reconcile_usage_counts(self, session: AsyncSession, user_id: int) -> int:
        """Rewrite usage counters of the user's garments from ledger counts.

        Returns the number of garments whose counter changed.
        """

        counts_stmt = (
            select(models.WearEvent.garment_id, func.count(models.WearEvent.id))
            .where(models.WearEvent.user_id == user_id)
            .group_by(models.WearEvent.garment_id)
        )
        garments_stmt = select(models.Garment).where(
            models.Garment.owner_id == user_id,
            models.Garment.owner_kind == OwnerKind.STYLER.value,
        )
        try:
            counts = dict((await session.execute(counts_stmt)).all())
            garments = (await session.execute(garments_stmt)).scalars().all()
            changed = 0
            for garment in garments:
                expected = counts.get(garment.id, 0)
                if garment.usage_count != expected:
                    garment.usage_count = expected
                    changed += 1
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Usage reconciliation failed for user %s: %s", user_id, exc)
            raise UpstreamError("Failed to reconcile usage counts.", detail=str(exc)) from exc

        if changed:
            logger.info("Reconciled usage counters of %s garments for user %s", changed, user_id)
        return changed
