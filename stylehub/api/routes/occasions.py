"""Occasion CRUD and per-occasion garment suggestions."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.api.auth import StylerDependency
from stylehub.api.deps import get_suggestion_orchestrator
from stylehub.api.schemas import OccasionIn, OccasionOut
from stylehub.db import models
from stylehub.db.session import get_session
from stylehub.services.occasions import OccasionDraft, OccasionService
from stylehub.services.suggestions import SuggestionOrchestrator

router = APIRouter(prefix="/api/occasion", tags=["occasions"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_occasion(
    body: OccasionIn,
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    occasion = await OccasionService().create(
        session,
        user_id=user.id,
        draft=OccasionDraft.from_mapping(body.values()),
    )
    return {"occasion": OccasionOut.from_model(occasion)}


@router.get("")
async def list_occasions(
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    occasions = await OccasionService().list_for_user(session, user_id=user.id)
    return {"data": [OccasionOut.from_model(occasion) for occasion in occasions]}


@router.get("/{occasion_id}")
async def get_occasion(
    occasion_id: int,
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    occasion = await OccasionService().get(session, user_id=user.id, occasion_id=occasion_id)
    return {"occasion": OccasionOut.from_model(occasion)}


@router.put("/{occasion_id}")
async def update_occasion(
    occasion_id: int,
    body: OccasionIn,
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    occasion = await OccasionService().update(
        session,
        user_id=user.id,
        occasion_id=occasion_id,
        draft=OccasionDraft.from_mapping(body.values()),
    )
    return {"occasion": OccasionOut.from_model(occasion)}


@router.delete("/{occasion_id}")
async def delete_occasion(
    occasion_id: int,
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
) -> dict:
    await OccasionService().delete(session, user_id=user.id, occasion_id=occasion_id)
    return {"message": "Occasion deleted successfully"}


@router.get("/{occasion_id}/suggestions")
async def get_occasion_suggestions(
    occasion_id: int,
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
    orchestrator: SuggestionOrchestrator = Depends(get_suggestion_orchestrator),
) -> dict:
    """Partner garments matching the occasion type and the styler's profile."""

    return await orchestrator.suggest_for_occasion(
        session,
        user_id=user.id,
        occasion_id=occasion_id,
    )
