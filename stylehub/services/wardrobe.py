"""Business logic for managing styler wardrobes and partner inventory."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.recommender.candidates import (
    CandidateCriteria,
    CandidatePage,
    Pagination,
    SortSpec,
    build_filters,
    criteria_filters,
)
from stylehub.services.enums import (
    GARMENT_CATEGORIES,
    MAX_OCCASION_TAGS,
    MIN_OCCASION_TAGS,
    Gender,
    OccasionTag,
    OwnerKind,
    Role,
    SkinTone,
    Visibility,
)
from stylehub.services.errors import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
    store_errors,
)

logger = logging.getLogger(__name__)

GARMENT_NOT_FOUND = "Garment not found"

_SCALAR_FIELDS = (
    "name",
    "brand",
    "image",
    "color",
    "category",
    "gender",
    "price",
    "stock",
    "description",
)


def _normalise_tags(values: Iterable[str], allowed: set[str], field: str) -> list[str]:
    tags = list(dict.fromkeys(value.strip().lower() for value in values if value and value.strip()))
    invalid = [tag for tag in tags if tag not in allowed]
    if invalid:
        raise ValidationError(f"Unsupported {field}: {', '.join(invalid)}", [field])
    return tags


def validate_garment_values(values: Mapping[str, Any], *, partial: bool, owner_kind: OwnerKind) -> dict[str, Any]:
    """Check domain rules and return normalised values."""

    required = ["name", "color", "category", "occasion"]
    if owner_kind is OwnerKind.PARTNER:
        required.append("brand")
    if not partial:
        missing = [name for name in required if not values.get(name)]
        if missing:
            raise ValidationError.for_fields(missing)

    cleaned: dict[str, Any] = {}
    for name in _SCALAR_FIELDS:
        if name in values:
            value = values[name]
            cleaned[name] = value.strip() if isinstance(value, str) else value

    if "category" in cleaned:
        category = (cleaned["category"] or "").lower()
        if category not in GARMENT_CATEGORIES:
            raise ValidationError(f"Unsupported category: {cleaned['category']}", ["category"])
        cleaned["category"] = category
    if cleaned.get("gender") is not None and cleaned["gender"] not in {g.value for g in Gender}:
        raise ValidationError(f"Unsupported gender: {cleaned['gender']}", ["gender"])
    if cleaned.get("price") is not None and cleaned["price"] < 0:
        raise ValidationError.for_fields(["price"], reason="must not be negative")
    if cleaned.get("stock") is not None and cleaned["stock"] < 0:
        raise ValidationError.for_fields(["stock"], reason="must not be negative")
    for name in ("name", "color", "brand"):
        if name in cleaned and name in required and not cleaned[name]:
            raise ValidationError.for_fields([name])

    if "occasion" in values:
        occasions = _normalise_tags(values["occasion"] or [], {t.value for t in OccasionTag}, "occasion")
        if not MIN_OCCASION_TAGS <= len(occasions) <= MAX_OCCASION_TAGS:
            raise ValidationError(
                f"Please select between {MIN_OCCASION_TAGS} and {MAX_OCCASION_TAGS} occasions",
                ["occasion"],
            )
        cleaned["occasion"] = occasions
    if "suitable_skin_tones" in values:
        cleaned["suitable_skin_tones"] = _normalise_tags(
            values["suitable_skin_tones"] or [],
            {t.value for t in SkinTone},
            "suitableSkinTones",
        )
    if "visibility" in values and values["visibility"] is not None:
        visibility = values["visibility"]
        if owner_kind is OwnerKind.STYLER and visibility != Visibility.PRIVATE.value:
            raise ValidationError("Styler garments are always private", ["visibility"])
        if visibility not in {v.value for v in Visibility}:
            raise ValidationError(f"Unsupported visibility: {visibility}", ["visibility"])
        cleaned["visibility"] = visibility
    return cleaned


def _apply(garment: models.Garment, cleaned: Mapping[str, Any]) -> None:
    for name in _SCALAR_FIELDS:
        if name in cleaned:
            setattr(garment, name, cleaned[name])
    if "visibility" in cleaned:
        garment.visibility = cleaned["visibility"]
    if "occasion" in cleaned:
        garment.occasion_tags = [models.GarmentOccasion(value=value) for value in cleaned["occasion"]]
    if "suitable_skin_tones" in cleaned:
        garment.skin_tone_tags = [
            models.GarmentSkinTone(value=value) for value in cleaned["suitable_skin_tones"]
        ]


class WardrobeService:
    """Garment CRUD for both inventories, with owner-or-admin mutation."""

    async def create_garment(
        self,
        session: AsyncSession,
        *,
        owner: models.User,
        values: Mapping[str, Any],
    ) -> models.Garment:
        owner_kind = OwnerKind.PARTNER if owner.role == Role.PARTNER.value else OwnerKind.STYLER
        cleaned = validate_garment_values(values, partial=False, owner_kind=owner_kind)
        default_visibility = Visibility.PUBLIC if owner_kind is OwnerKind.PARTNER else Visibility.PRIVATE
        cleaned.setdefault("visibility", default_visibility.value)

        garment = models.Garment(owner_kind=owner_kind.value, owner_id=owner.id, usage_count=0)
        _apply(garment, cleaned)
        session.add(garment)
        await self._commit(session, "create garment")
        logger.info("User %s added %s garment %s", owner.id, owner_kind.value, garment.id)
        return await self._load(session, garment.id)

    async def get_garment(
        self,
        session: AsyncSession,
        *,
        garment_id: int,
        viewer: models.User | None,
        owner_kind: OwnerKind,
    ) -> models.Garment:
        """Return a garment; private ones only to their owner or an admin."""

        garment = await self._load(session, garment_id)
        if garment.owner_kind != owner_kind.value:
            raise NotFoundError(GARMENT_NOT_FOUND)
        if garment.visibility == Visibility.PRIVATE.value:
            self._ensure_can_manage(garment, viewer)
        return garment

    async def update_garment(
        self,
        session: AsyncSession,
        *,
        garment_id: int,
        actor: models.User,
        owner_kind: OwnerKind,
        values: Mapping[str, Any],
    ) -> models.Garment:
        garment = await self._load(session, garment_id)
        if garment.owner_kind != owner_kind.value:
            raise NotFoundError(GARMENT_NOT_FOUND)
        self._ensure_can_manage(garment, actor)

        cleaned = validate_garment_values(values, partial=True, owner_kind=owner_kind)
        _apply(garment, cleaned)
        await self._commit(session, "update garment")
        return await self._load(session, garment_id)

    async def delete_garment(
        self,
        session: AsyncSession,
        *,
        garment_id: int,
        actor: models.User,
        owner_kind: OwnerKind,
    ) -> None:
        """Delete a garment and unlink it from occasions; wear events are kept."""

        garment = await self._load(session, garment_id)
        if garment.owner_kind != owner_kind.value:
            raise NotFoundError(GARMENT_NOT_FOUND)
        self._ensure_can_manage(garment, actor)

        with store_errors("delete garment"):
            await session.execute(
                delete(models.OccasionGarment).where(models.OccasionGarment.garment_id == garment_id)
            )
            await session.delete(garment)
        await self._commit(session, "delete garment")

    async def list_owned(
        self,
        session: AsyncSession,
        *,
        owner: models.User,
        criteria: CandidateCriteria,
        pagination: Pagination,
        sort: SortSpec | None = None,
    ) -> CandidatePage:
        """List the caller's own garments with the inventory listing filters."""

        filters = criteria_filters(criteria)
        filters.append(models.Garment.owner_id == owner.id)
        return await self._page(session, filters, pagination, sort)

    async def list_public(
        self,
        session: AsyncSession,
        *,
        criteria: CandidateCriteria,
        pagination: Pagination,
        sort: SortSpec | None = None,
    ) -> CandidatePage:
        return await self._page(session, build_filters(criteria), pagination, sort)

    async def _page(
        self,
        session: AsyncSession,
        filters: list[Any],
        pagination: Pagination,
        sort: SortSpec | None,
    ) -> CandidatePage:
        condition = and_(*filters)
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
        except SQLAlchemyError as exc:
            logger.error("Garment listing failed: %s", exc)
            raise UpstreamError("Failed to list garments.", detail=str(exc)) from exc
        return CandidatePage(
            total=total or 0,
            page=pagination.page,
            limit=pagination.limit,
            items=list(result.scalars().all()),
        )

    async def _load(self, session: AsyncSession, garment_id: int) -> models.Garment:
        stmt = (
            select(models.Garment)
            .where(models.Garment.id == garment_id)
            .execution_options(populate_existing=True)
        )
        with store_errors("load garment"):
            garment = (await session.execute(stmt)).scalar_one_or_none()
        if garment is None:
            raise NotFoundError(GARMENT_NOT_FOUND)
        return garment

    @staticmethod
    def _ensure_can_manage(garment: models.Garment, actor: models.User | None) -> None:
        if actor is None:
            raise UnauthorizedError("Unauthorized")
        if actor.role != Role.ADMIN.value and garment.owner_id != actor.id:
            raise ForbiddenError("Access denied")

    @staticmethod
    async def _commit(session: AsyncSession, action: str) -> None:
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise UpstreamError(f"Failed to {action}.", detail=str(exc)) from exc
