"""Garment suggestions for stylers, built from profile, filter and ranker."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.metrics.prometheus_exporter import suggestion_requests_total
from stylehub.recommender.candidates import (
    CandidateCriteria,
    CandidateFilter,
    Pagination,
    SortSpec,
)
from stylehub.recommender.profile import ProfileResolver
from stylehub.recommender.ranker import MatchRanker
from stylehub.services.occasions import OccasionService

logger = logging.getLogger(__name__)

GENDER_NOT_SET = "not set"


class SuggestionOrchestrator:
    """Composes profile resolution, candidate filtering and ranking."""

    def __init__(
        self,
        *,
        occasions: OccasionService | None = None,
        profiles: ProfileResolver | None = None,
        candidates: CandidateFilter | None = None,
        ranker: MatchRanker | None = None,
        occasion_limit: int = 20,
    ) -> None:
        self._occasions = occasions or OccasionService()
        self._profiles = profiles or ProfileResolver()
        self._candidates = candidates or CandidateFilter()
        self._ranker = ranker or MatchRanker()
        self._occasion_limit = occasion_limit

    async def suggest_for_occasion(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        occasion_id: int,
    ) -> dict[str, Any]:
        """Suggest partner garments for one of the styler's occasions."""

        suggestion_requests_total.labels(kind="occasion").inc()
        occasion = await self._occasions.get(session, user_id=user_id, occasion_id=occasion_id)
        profile = await self._profiles.resolve(session, user_id)

        criteria = CandidateCriteria(
            occasion_types=(occasion.type,) if occasion.type else (),
            gender=profile.gender,
            skin_tone=occasion.skin_tone or profile.skin_tone,
        )
        garments = await self._candidates.top(session, criteria, self._occasion_limit)
        ranked = self._ranker.rank(garments, criteria)
        await self._ranker.attach_partners(session, ranked)
        logger.info(
            "Suggested %s garments for occasion %s of user %s",
            len(ranked),
            occasion.id,
            user_id,
        )

        return {
            "suggestions": [item.as_dict() for item in ranked],
            "occasion": {
                "id": occasion.id,
                "title": occasion.title,
                "type": occasion.type,
                "date": occasion.date.isoformat(),
            },
            "userGender": profile.gender or GENDER_NOT_SET,
        }

    async def list_suggestions(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        criteria: CandidateCriteria,
        pagination: Pagination,
        sort: SortSpec | None = None,
    ) -> dict[str, Any]:
        """Paginated suggestion listing.

        Without an explicit occasion in ``criteria`` the occasion types the
        styler has planned before are used; with none planned the occasion
        predicate is dropped. Gender and skin tone always come from the profile.
        """

        suggestion_requests_total.labels(kind="listing").inc()
        profile = await self._profiles.resolve(session, user_id)
        occasion_types = criteria.occasion_types or tuple(sorted(profile.occasion_types))
        criteria = replace(
            criteria,
            occasion_types=occasion_types,
            gender=profile.gender,
            skin_tone=profile.skin_tone,
        )
        sort = sort or SortSpec()

        page = await self._candidates.fetch(session, criteria, pagination, sort)
        ranked = self._ranker.rank(page.items, criteria, preserve_order=sort.is_explicit)
        await self._ranker.attach_partners(session, ranked)

        return {
            "meta": {
                "total": page.total,
                "page": page.page,
                "limit": page.limit,
                "pages": page.pages,
            },
            "data": [item.as_dict() for item in ranked],
        }
