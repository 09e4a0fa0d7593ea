"""Labelling and ordering of candidate garments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.db import models
from stylehub.recommender.candidates import CandidateCriteria
from stylehub.services.errors import UpstreamError

logger = logging.getLogger(__name__)

REASON_SEPARATOR = " | "
FALLBACK_REASON = "Recommended for you"


@dataclass(frozen=True, slots=True)
class PartnerContact:
    id: int
    name: str
    location: str
    phone: str
    email: str | None

    @classmethod
    def from_model(cls, partner: models.Partner) -> "PartnerContact":
        return cls(
            id=partner.user_id,
            name=partner.name,
            location=partner.location or "Location not specified",
            phone=partner.phone or "N/A",
            email=partner.email,
        )


@dataclass(slots=True)
class RankedSuggestion:
    garment: models.Garment
    reasons: list[str]
    partner: PartnerContact | None = None

    @property
    def match_reason(self) -> str:
        return REASON_SEPARATOR.join(self.reasons) if self.reasons else FALLBACK_REASON

    def as_dict(self) -> dict[str, Any]:
        garment = self.garment
        return {
            "id": garment.id,
            "name": garment.name,
            "category": garment.category,
            "color": garment.color,
            "image": garment.image,
            "gender": garment.gender,
            "price": garment.price,
            "brand": garment.brand,
            "occasion": garment.occasions,
            "suitableSkinTones": garment.suitable_skin_tones,
            "matchReason": self.match_reason,
            "partner": None
            if self.partner is None
            else {
                "id": self.partner.id,
                "name": self.partner.name,
                "location": self.partner.location,
                "phone": self.partner.phone,
                "email": self.partner.email,
            },
        }


def match_reasons(garment: models.Garment, criteria: CandidateCriteria) -> list[str]:
    """Explain which requested attributes a garment matches explicitly."""

    reasons: list[str] = []
    tags = garment.occasions
    matched_occasion = next((value for value in criteria.occasion_types if value in tags), None)
    if matched_occasion:
        reasons.append(f"Perfect for {matched_occasion}")
    gender = criteria.effective_gender
    if gender and garment.gender == gender:
        reasons.append(f"Fits {gender}")
    if criteria.skin_tone and criteria.skin_tone in garment.suitable_skin_tones:
        reasons.append(f"Suits {criteria.skin_tone} skin tone")
    return reasons


class MatchRanker:
    """Attaches match reasons and partner contacts, strongest matches first."""

    def rank(
        self,
        garments: Sequence[models.Garment],
        criteria: CandidateCriteria,
        *,
        preserve_order: bool = False,
    ) -> list[RankedSuggestion]:
        ranked = [RankedSuggestion(garment, match_reasons(garment, criteria)) for garment in garments]
        if not preserve_order:
            # stable: equal scores keep the incoming newest-first order
            ranked.sort(key=lambda item: len(item.reasons), reverse=True)
        return ranked

    async def attach_partners(
        self,
        session: AsyncSession,
        suggestions: list[RankedSuggestion],
    ) -> list[RankedSuggestion]:
        """Resolve owning partner contacts in a single query."""

        owner_ids = {item.garment.owner_id for item in suggestions}
        if not owner_ids:
            return suggestions
        try:
            result = await session.execute(
                select(models.Partner).where(models.Partner.user_id.in_(owner_ids))
            )
        except SQLAlchemyError as exc:
            logger.error("Failed to load partner contacts: %s", exc)
            raise UpstreamError("Failed to load partner details.", detail=str(exc)) from exc

        partners = {partner.user_id: PartnerContact.from_model(partner) for partner in result.scalars()}
        for item in suggestions:
            item.partner = partners.get(item.garment.owner_id)
        return suggestions
