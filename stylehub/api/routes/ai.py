"""AI stylist routes: colour advice and skin tone detection."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stylehub.api.auth import StylerDependency
from stylehub.api.deps import get_stylist_client
from stylehub.api.schemas import ColorAdviceIn, SkinToneIn
from stylehub.db import models
from stylehub.db.session import get_session
from stylehub.nlp.stylist_client import StylistClient
from stylehub.services.accounts import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/suggestions")
async def color_suggestions(
    body: ColorAdviceIn,
    _: models.User = StylerDependency,
    client: StylistClient = Depends(get_stylist_client),
) -> dict:
    advice = await client.suggest_colors(body.skin_tone or "")
    return advice.model_dump(by_alias=True)


@router.post("/detect-skin-tone")
async def detect_skin_tone(
    body: SkinToneIn,
    user: models.User = StylerDependency,
    session: AsyncSession = Depends(get_session),
    client: StylistClient = Depends(get_stylist_client),
) -> dict:
    detection = await client.detect_skin_tone(body.image_url or "")
    if body.save_to_profile:
        await AccountService().update_styler_profile(
            session,
            user_id=user.id,
            values={"skin_tone": detection.skin_tone},
        )
        logger.info("Stored detected skin tone %s for user %s", detection.skin_tone, user.id)
    return detection.model_dump(by_alias=True)
