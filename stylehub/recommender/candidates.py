"""Declarative candidate selection over the partner inventory.

Every predicate is optional: a predicate whose input is unknown is left out
instead of being matched against an empty value, so missing profile data
widens the candidate pool rather than emptying it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from sqlalchemy import ColumnElement, and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.services.enums import Gender, OwnerKind, StylerGender, Visibility
from stylehub.services.errors import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

SORTABLE_FIELDS: dict[str, Any] = {
    "createdAt": models.Garment.created_at,
    "created_at": models.Garment.created_at,
    "name": models.Garment.name,
    "price": models.Garment.price,
    "color": models.Garment.color,
    "category": models.Garment.category,
}


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_raw(cls, page: Any = None, limit: Any = None) -> "Pagination":
        """Clamp user supplied paging values; garbage falls back to defaults."""

        def _as_int(value: Any, default: int) -> int:
            try:
                return int(value)
            except (TypeError, ValueError):
                return default

        return cls(
            page=max(1, _as_int(page, 1)),
            limit=max(1, min(MAX_PAGE_SIZE, _as_int(limit, DEFAULT_PAGE_SIZE))),
        )


@dataclass(frozen=True, slots=True)
class SortSpec:
    """Ordered list of (column, descending) pairs; empty means newest first."""

    fields: tuple[tuple[str, bool], ...] = ()

    @property
    def is_explicit(self) -> bool:
        return bool(self.fields)

    def order_by(self) -> list[Any]:
        clauses: list[Any] = []
        for name, descending in self.fields:
            column = SORTABLE_FIELDS[name]
            clauses.append(column.desc() if descending else column.asc())
        if not clauses:
            clauses.append(models.Garment.created_at.desc())
        clauses.append(models.Garment.id.desc())
        return clauses


def parse_sort(raw: str | None) -> SortSpec:
    """Parse ``field:asc,field:desc``; unknown fields are ignored, direction defaults to desc."""

    if not raw:
        return SortSpec()
    fields: list[tuple[str, bool]] = []
    for part in raw.split(","):
        name, _, direction = part.partition(":")
        name = name.strip()
        if name not in SORTABLE_FIELDS:
            continue
        fields.append((name, direction.strip().lower() != "asc"))
    return SortSpec(tuple(fields))


@dataclass(frozen=True, slots=True)
class CandidateCriteria:
    """Inputs of the candidate query. ``None``/empty values omit their predicate."""

    occasion_types: tuple[str, ...] = ()
    gender: str | None = None
    skin_tone: str | None = None
    search: str | None = None
    color: str | None = None
    category: str | None = None
    min_price: float | None = None
    max_price: float | None = None

    @property
    def effective_gender(self) -> str | None:
        if not self.gender or self.gender == StylerGender.OTHER.value:
            return None
        return self.gender


@dataclass(slots=True)
class CandidatePage:
    total: int
    page: int
    limit: int
    items: list[models.Garment] = field(default_factory=list)

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _contains(column: Any, needle: str) -> ColumnElement[bool]:
    return func.lower(column).contains(needle.strip().lower(), autoescape=True)


def occasion_predicate(occasion_types: Iterable[str]) -> ColumnElement[bool] | None:
    types = [value for value in occasion_types if value]
    if not types:
        return None
    return models.Garment.occasion_tags.any(models.GarmentOccasion.value.in_(types))


def gender_predicate(gender: str | None) -> ColumnElement[bool] | None:
    if not gender or gender == StylerGender.OTHER.value:
        return None
    return or_(
        models.Garment.gender == gender,
        models.Garment.gender == Gender.UNISEX.value,
        models.Garment.gender.is_(None),
    )


def skin_tone_predicate(skin_tone: str | None) -> ColumnElement[bool] | None:
    if not skin_tone:
        return None
    return or_(
        models.Garment.skin_tone_tags.any(models.GarmentSkinTone.value == skin_tone),
        ~models.Garment.skin_tone_tags.any(),
    )


def inventory_scope() -> list[ColumnElement[bool]]:
    """Public, partner-listed garments only."""

    return [
        models.Garment.visibility == Visibility.PUBLIC.value,
        models.Garment.owner_kind == OwnerKind.PARTNER.value,
    ]


def build_filters(criteria: CandidateCriteria) -> list[ColumnElement[bool]]:
    """Return the conjunction of every predicate that applies to ``criteria``."""

    return inventory_scope() + criteria_filters(criteria)


def criteria_filters(criteria: CandidateCriteria) -> list[ColumnElement[bool]]:
    filters: list[ColumnElement[bool]] = []
    for predicate in (
        occasion_predicate(criteria.occasion_types),
        gender_predicate(criteria.gender),
        skin_tone_predicate(criteria.skin_tone),
    ):
        if predicate is not None:
            filters.append(predicate)

    if criteria.search and criteria.search.strip():
        filters.append(
            or_(
                _contains(models.Garment.name, criteria.search),
                _contains(models.Garment.color, criteria.search),
                _contains(models.Garment.category, criteria.search),
            )
        )
    if criteria.color and criteria.color.strip():
        filters.append(_contains(models.Garment.color, criteria.color))
    if criteria.category and criteria.category.strip():
        filters.append(_contains(models.Garment.category, criteria.category))
    if criteria.min_price is not None:
        filters.append(models.Garment.price >= criteria.min_price)
    if criteria.max_price is not None:
        filters.append(models.Garment.price <= criteria.max_price)
    return filters


class CandidateFilter:
    """Runs candidate queries against the garment store."""

    async def fetch(
        self,
        session: AsyncSession,
        criteria: CandidateCriteria,
        pagination: Pagination,
        sort: SortSpec | None = None,
    ) -> CandidatePage:
        """Return one page of candidates together with the unpaged total."""

        condition = and_(*build_filters(criteria))
        sort = sort or SortSpec()
        try:
            total = await session.scalar(
                select(func.count()).select_from(models.Garment).where(condition)
            )
            result = await session.execute(
                select(models.Garment)
                .where(condition)
                .order_by(*sort.order_by())
                .offset(pagination.offset)
                .limit(pagination.limit)
            )
            items = list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.error("Candidate query failed: %s", exc)
            raise UpstreamError("Failed to query inventory.", detail=str(exc)) from exc

        return CandidatePage(
            total=total or 0,
            page=pagination.page,
            limit=pagination.limit,
            items=items,
        )

    async def top(
        self,
        session: AsyncSession,
        criteria: CandidateCriteria,
        limit: int,
    ) -> Sequence[models.Garment]:
        """Return at most ``limit`` newest candidates."""

        try:
            result = await session.execute(
                select(models.Garment)
                .where(*build_filters(criteria))
                .order_by(*SortSpec().order_by())
                .limit(limit)
            )
        except SQLAlchemyError as exc:
            logger.error("Candidate query failed: %s", exc)
            raise UpstreamError("Failed to query inventory.", detail=str(exc)) from exc
        return list(result.scalars().all())
