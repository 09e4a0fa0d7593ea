"""Service factories shared by the routers."""

from __future__ import annotations

from typing import AsyncIterator

from stylehub.config.settings import get_settings
from stylehub.nlp.stylist_client import StylistClient
from stylehub.services.closet_health import ClosetHealthService
from stylehub.services.enums import WearDedupPolicy
from stylehub.services.errors import UpstreamError
from stylehub.services.suggestions import SuggestionOrchestrator
from stylehub.services.wear_ledger import WearLedger


def get_wear_ledger() -> WearLedger:
    settings = get_settings()
    try:
        policy = WearDedupPolicy(settings.wear_dedup_policy)
    except ValueError as exc:
        raise UpstreamError(
            f"Server configuration error: unknown WEAR_DEDUP_POLICY {settings.wear_dedup_policy!r}",
        ) from exc
    return WearLedger(policy)


def get_closet_health_service() -> ClosetHealthService:
    return ClosetHealthService(
        get_wear_ledger(),
        unused_after_days=get_settings().unused_after_days,
    )


def get_suggestion_orchestrator() -> SuggestionOrchestrator:
    return SuggestionOrchestrator(occasion_limit=get_settings().occasion_suggestion_limit)


async def get_stylist_client() -> AsyncIterator[StylistClient]:
    """Yield a client and close its HTTP pool once the request is done."""

    client = StylistClient()
    try:
        yield client
    finally:
        await client.close()
