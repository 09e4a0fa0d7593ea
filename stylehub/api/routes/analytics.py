"""Wear recording and closet health analytics."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.api.auth import StylerDependency
from stylehub.api.deps import get_closet_health_service, get_wear_ledger
from stylehub.api.schemas import WearEventOut, WearIn
from stylehub.db import models
from stylehub.db.session import get_session
from stylehub.services.closet_health import ClosetHealthService
from stylehub.services.errors import ValidationError
from stylehub.services.wear_ledger import WearLedger

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.post("/wear", status_code=status.HTTP_201_CREATED)
async def record_wear(
    body: WearIn,
    response: Response,
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
    ledger: WearLedger = Depends(get_wear_ledger),
) -> dict:
    if body.dress_id is None:
        raise ValidationError.for_fields(["dressId"])
    event, created = await ledger.record(
        session,
        garment_id=body.dress_id,
        user_id=user.id,
        color=body.color,
        category=body.category,
        worn_at=body.date,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
        return {"message": "Wear already recorded for this day", "data": WearEventOut.from_model(event)}
    return {"message": "Wear recorded successfully", "data": WearEventOut.from_model(event)}


@router.get("/wear", response_model=list[WearEventOut])
async def wear_history(
    limit: int = Query(default=50, ge=1, le=500),
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
    ledger: WearLedger = Depends(get_wear_ledger),
) -> list[WearEventOut]:
    events = await ledger.history(session, user.id, limit=limit)
    return [WearEventOut.from_model(event) for event in events]


@router.post("/wear/reconcile")
async def reconcile_usage(
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
    ledger: WearLedger = Depends(get_wear_ledger),
) -> dict:
    changed = await ledger.reconcile_usage_counts(session, user.id)
    return {"updated": changed}


@router.get("/health")
async def closet_health(
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
    service: ClosetHealthService = Depends(get_closet_health_service),
) -> dict:
    result = await service.evaluate(session, user.id)
    return result.as_dict()
