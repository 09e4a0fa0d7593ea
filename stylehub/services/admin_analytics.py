"""Platform-wide rollups for admins: account totals and partner inventories."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.services.enums import OwnerKind, Role
from stylehub.services.errors import store_errors

logger = logging.getLogger(__name__)

TREND_WEEKS = 4
UNSPECIFIED_LOCATION = "Not specified"


@dataclass(slots=True)
class RegistrationOverview:
    total_users: int = 0
    by_role: dict[str, int] = field(default_factory=dict)
    pending_approvals: int = 0
    # oldest week first: (label, registrations)
    weekly_trend: list[tuple[str, int]] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalUsers": self.total_users,
            "totalStylists": self.by_role.get(Role.STYLER.value, 0),
            "totalPartners": self.by_role.get(Role.PARTNER.value, 0),
            "totalAdmins": self.by_role.get(Role.ADMIN.value, 0),
            "pendingApprovals": self.pending_approvals,
            "weeklyTrend": [
                {"week": label, "registrations": count} for label, count in self.weekly_trend
            ],
        }


@dataclass(slots=True)
class PartnerInventory:
    partner: models.Partner
    is_approved: bool
    garments: list[models.Garment] = field(default_factory=list)


class AdminAnalytics:
    """Read-only aggregates over accounts and partner listings."""

    async def registrations(
        self,
        session: AsyncSession,
        *,
        now: datetime | None = None,
    ) -> RegistrationOverview:
        """Count accounts by role and approval, plus weekly sign-ups.

        The trend covers the last four seven-day windows ending at ``now``;
        "Week 4" is the most recent one.
        """

        now = now or datetime.now(timezone.utc)
        totals_stmt = select(models.User.role, models.User.is_approved, func.count()).group_by(
            models.User.role, models.User.is_approved
        )
        week = case(
            *[
                (models.User.created_at >= now - timedelta(weeks=offset + 1), TREND_WEEKS - offset)
                for offset in range(TREND_WEEKS)
            ]
        ).label("week")
        trend_stmt = (
            select(week, func.count())
            .where(
                models.User.created_at >= now - timedelta(weeks=TREND_WEEKS),
                models.User.created_at < now,
            )
            .group_by(week)
        )
        with store_errors("aggregate registrations"):
            totals = (await session.execute(totals_stmt)).all()
            trend = dict((await session.execute(trend_stmt)).all())

        overview = RegistrationOverview()
        for role, is_approved, count in totals:
            overview.total_users += count
            overview.by_role[role] = overview.by_role.get(role, 0) + count
            if not is_approved:
                overview.pending_approvals += count
        overview.weekly_trend = [
            (f"Week {number}", trend.get(number, 0)) for number in range(1, TREND_WEEKS + 1)
        ]
        return overview

    async def partner_inventories(self, session: AsyncSession) -> list[PartnerInventory]:
        """Every partner, newest first, with its listed garments newest first."""

        partners_stmt = (
            select(models.Partner, models.User.is_approved)
            .join(models.User, models.User.id == models.Partner.user_id)
            .order_by(models.Partner.created_at.desc(), models.Partner.user_id.desc())
        )
        garments_stmt = (
            select(models.Garment)
            .where(models.Garment.owner_kind == OwnerKind.PARTNER.value)
            .order_by(models.Garment.created_at.desc(), models.Garment.id.desc())
        )
        with store_errors("load partner inventories"):
            partners = (await session.execute(partners_stmt)).all()
            garments = (await session.execute(garments_stmt)).scalars().all()

        inventories = {
            partner.user_id: PartnerInventory(partner=partner, is_approved=is_approved)
            for partner, is_approved in partners
        }
        for garment in garments:
            inventory = inventories.get(garment.owner_id)
            if inventory is not None:
                inventory.garments.append(garment)
        logger.debug("Loaded inventories of %s partners", len(inventories))
        return list(inventories.values())
