"""Match reasons, ordering and partner contacts of ranked suggestions."""

from __future__ import annotations

import pytest

from stylehub.db import models
from stylehub.recommender.candidates import CandidateCriteria
from stylehub.recommender.ranker import FALLBACK_REASON, MatchRanker, match_reasons


def make_garment(
    name: str,
    *,
    occasions: tuple[str, ...] = (),
    gender: str | None = None,
    skin_tones: tuple[str, ...] = (),
    owner_id: int = 1,
) -> models.Garment:
    garment = models.Garment(
        name=name,
        color="red",
        category="dress",
        gender=gender,
        owner_id=owner_id,
        owner_kind="partner",
    )
    garment.occasion_tags = [models.GarmentOccasion(value=value) for value in occasions]
    garment.skin_tone_tags = [models.GarmentSkinTone(value=value) for value in skin_tones]
    return garment


WEDDING_CRITERIA = CandidateCriteria(occasion_types=("wedding",), gender="female", skin_tone="medium")


def test_reasons_list_every_explicit_match() -> None:
    garment = make_garment(
        "A", occasions=("wedding",), gender="female", skin_tones=("medium", "tan")
    )

    reasons = match_reasons(garment, WEDDING_CRITERIA)

    assert reasons == ["Perfect for wedding", "Fits female", "Suits medium skin tone"]


def test_wildcard_matches_earn_no_reason() -> None:
    garment = make_garment("B", occasions=("wedding",), gender="unisex")

    assert match_reasons(garment, WEDDING_CRITERIA) == ["Perfect for wedding"]


def test_fallback_reason_when_nothing_matches_explicitly() -> None:
    ranked = MatchRanker().rank([make_garment("plain")], CandidateCriteria())

    assert ranked[0].match_reason == FALLBACK_REASON


def test_rank_orders_by_match_count_and_keeps_ties_stable() -> None:
    plain_new = make_garment("plain new")
    strong = make_garment("strong", occasions=("wedding",), gender="female", skin_tones=("medium",))
    plain_old = make_garment("plain old")
    medium = make_garment("medium", occasions=("wedding",))

    ranked = MatchRanker().rank([plain_new, strong, plain_old, medium], WEDDING_CRITERIA)

    assert [item.garment.name for item in ranked] == ["strong", "medium", "plain new", "plain old"]
    assert ranked[0].match_reason == "Perfect for wedding | Fits female | Suits medium skin tone"


def test_preserve_order_keeps_incoming_sequence() -> None:
    plain = make_garment("plain")
    strong = make_garment("strong", occasions=("wedding",))

    ranked = MatchRanker().rank([plain, strong], WEDDING_CRITERIA, preserve_order=True)

    assert [item.garment.name for item in ranked] == ["plain", "strong"]


def test_other_gender_is_never_a_reason() -> None:
    garment = make_garment("x", gender="other")

    assert match_reasons(garment, CandidateCriteria(gender="other")) == []


@pytest.mark.asyncio
async def test_attach_partners_fills_placeholders(session, factory) -> None:
    partner = await factory.partner(name="Silk House", location=None, phone=None)
    garment = await factory.garment(partner, occasions=["wedding"])

    ranked = MatchRanker().rank([garment], WEDDING_CRITERIA)
    await MatchRanker().attach_partners(session, ranked)
    payload = ranked[0].as_dict()

    assert payload["partner"] == {
        "id": partner.id,
        "name": "Silk House",
        "location": "Location not specified",
        "phone": "N/A",
        "email": partner.partner.email,
    }
    assert payload["occasion"] == ["wedding"]
    assert payload["matchReason"] == "Perfect for wedding"


@pytest.mark.asyncio
async def test_attach_partners_without_suggestions(session) -> None:
    assert await MatchRanker().attach_partners(session, []) == []
