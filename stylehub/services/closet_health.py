"""Closet health heuristics: usage and diversity of a styler's wardrobe."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.metrics.prometheus_exporter import closet_health_evaluations_total
from stylehub.services.enums import OwnerKind
from stylehub.services.errors import UpstreamError
from stylehub.services.wear_ledger import WearLedger, as_utc

logger = logging.getLogger(__name__)

EMPTY_WARDROBE_SUGGESTION = "Start adding clothes to your wardrobe!"
DIVERSITY_MIN_ITEMS = 5


class ScorableGarment(Protocol):
    id: int
    color: str
    category: str
    usage_count: int


@dataclass(frozen=True, slots=True)
class FrequencyEntry:
    name: str
    value: int


@dataclass(slots=True)
class ClosetHealth:
    score: int
    total: int = 0
    worn: int = 0
    unused: int = 0
    colors: list[FrequencyEntry] = field(default_factory=list)
    categories: list[FrequencyEntry] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "stats": {
                "total": self.total,
                "worn": self.worn,
                "unused": self.unused,
                "colors": [{"name": entry.name, "value": entry.value} for entry in self.colors],
                "categories": [
                    {"name": entry.name, "value": entry.value} for entry in self.categories
                ],
            },
            "suggestions": list(self.suggestions),
        }


def is_unused(
    garment: ScorableGarment,
    last_worn: datetime | None,
    cutoff: datetime,
) -> bool:
    """Never counted as worn, or last worn before ``cutoff``."""

    if garment.usage_count == 0:
        return True
    return last_worn is not None and as_utc(last_worn) < cutoff


def _frequencies(values: Sequence[str]) -> list[FrequencyEntry]:
    counts = Counter(values)
    # Counter preserves first-seen order, sorted() is stable
    return [
        FrequencyEntry(name, value)
        for name, value in sorted(counts.items(), key=lambda item: item[1], reverse=True)
    ]


def score_closet(
    garments: Sequence[ScorableGarment],
    last_worn: Mapping[int, datetime],
    *,
    now: datetime | None = None,
    unused_after_days: int = 30,
) -> ClosetHealth:
    """Compute the 0-100 closet health score with improvement suggestions."""

    total = len(garments)
    if total == 0:
        return ClosetHealth(score=0, suggestions=[EMPTY_WARDROBE_SUGGESTION])

    now = as_utc(now) if now else datetime.now(timezone.utc)
    cutoff = now - timedelta(days=unused_after_days)

    unused = sum(1 for garment in garments if is_unused(garment, last_worn.get(garment.id), cutoff))
    colors = _frequencies([garment.color.lower() for garment in garments])
    categories = _frequencies([garment.category.lower() for garment in garments])

    score = 100
    suggestions: list[str] = []

    unused_percentage = unused / total * 100
    if unused_percentage > 50:
        score -= 20
        suggestions.append(f"You have {unused} unused items. Try wearing them more often.")
    elif unused_percentage > 20:
        score -= 10
        suggestions.append("Consider donating or wearing your unused clothes.")

    if len(colors) < 3 and total > DIVERSITY_MIN_ITEMS:
        score -= 15
        suggestions.append("Your wardrobe lacks color variety. Try adding more colorful items.")

    dominant = colors[0]
    if dominant.value / total > 0.4 and total > DIVERSITY_MIN_ITEMS:
        score -= 10
        suggestions.append(f"You have a lot of {dominant.name} clothes. Add some variety!")

    if len(categories) < 3 and total > DIVERSITY_MIN_ITEMS:
        score -= 10
        suggestions.append("Try diversifying your wardrobe with different types of clothes.")

    return ClosetHealth(
        score=max(0, min(100, round(score))),
        total=total,
        worn=total - unused,
        unused=unused,
        colors=colors,
        categories=categories,
        suggestions=suggestions,
    )


class ClosetHealthService:
    """Loads a styler's wardrobe and ledger and scores them."""

    def __init__(self, ledger: WearLedger, *, unused_after_days: int = 30) -> None:
        self._ledger = ledger
        self._unused_after_days = unused_after_days

    async def evaluate(
        self,
        session: AsyncSession,
        user_id: int,
        *,
        now: datetime | None = None,
    ) -> ClosetHealth:
        stmt = select(models.Garment).where(
            models.Garment.owner_id == user_id,
            models.Garment.owner_kind == OwnerKind.STYLER.value,
        )
        try:
            garments = list((await session.execute(stmt)).scalars().all())
        except SQLAlchemyError as exc:
            logger.error("Failed to load wardrobe of user %s: %s", user_id, exc)
            raise UpstreamError("Failed to load wardrobe.", detail=str(exc)) from exc

        closet_health_evaluations_total.inc()
        if not garments:
            return score_closet(garments, {})

        last_worn = await self._ledger.last_worn_map(session, user_id)
        return score_closet(
            garments,
            last_worn,
            now=now,
            unused_after_days=self._unused_after_days,
        )
