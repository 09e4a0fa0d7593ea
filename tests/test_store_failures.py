"""Database failures surface as UpstreamError and as JSON error bodies."""

from __future__ import annotations

import pytest
import pytest_mock
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from stylehub.services.admin_analytics import AdminAnalytics
from stylehub.services.enums import OwnerKind
from stylehub.services.errors import UpstreamError
from stylehub.services.occasions import OccasionService
from stylehub.services.wardrobe import WardrobeService
from stylehub.services.wear_ledger import WearLedger


def headers(user) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}


async def drop_tables(engine, *names: str) -> None:
    async with engine.begin() as conn:
        for name in names:
            await conn.execute(text(f"DROP TABLE {name}"))


@pytest.mark.asyncio
async def test_occasion_reads_raise_upstream_error(session, factory, engine) -> None:
    styler = await factory.styler()
    await drop_tables(engine, "occasion_garments", "occasions")
    service = OccasionService()

    with pytest.raises(UpstreamError) as error:
        await service.get(session, user_id=styler.id, occasion_id=1)
    assert error.value.message == "Failed to load occasion."
    assert "no such table" in error.value.detail

    with pytest.raises(UpstreamError):
        await service.list_for_user(session, user_id=styler.id)


@pytest.mark.asyncio
async def test_wear_history_raises_upstream_error(session, factory, engine) -> None:
    styler = await factory.styler()
    await drop_tables(engine, "wear_events")

    with pytest.raises(UpstreamError) as error:
        await WearLedger().history(session, styler.id)

    assert error.value.message == "Failed to load wear history."


@pytest.mark.asyncio
async def test_garment_lookup_raises_upstream_error(session, factory, engine) -> None:
    styler = await factory.styler()
    await drop_tables(engine, "occasion_garments", "garment_occasions", "garment_skin_tones", "garments")

    with pytest.raises(UpstreamError):
        await WardrobeService().get_garment(
            session, garment_id=1, viewer=styler, owner_kind=OwnerKind.STYLER
        )


@pytest.mark.asyncio
async def test_occasion_listing_failure_is_a_json_error(api_client, factory, engine) -> None:
    styler = await factory.styler()
    await drop_tables(engine, "occasion_garments", "occasions")

    response = await api_client.get("/api/occasion", headers=headers(styler))

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to list occasions."
    assert "no such table" in response.json()["detail"]


@pytest.mark.asyncio
async def test_unwrapped_database_errors_are_rendered(
    api_client, factory, mocker: pytest_mock.MockerFixture
) -> None:
    admin = await factory.admin()
    mocker.patch.object(
        AdminAnalytics,
        "registrations",
        mocker.AsyncMock(side_effect=OperationalError("SELECT 1", None, Exception("disk I/O error"))),
    )

    response = await api_client.get("/api/admin/analytics", headers=headers(admin))

    assert response.status_code == 500
    assert response.json()["error"] == "Database error."
    assert "disk I/O error" in response.json()["detail"]
