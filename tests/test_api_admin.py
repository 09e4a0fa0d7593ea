"""HTTP flows for profiles, account rejection and admin analytics."""

from __future__ import annotations

import pytest


def headers(user) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}


@pytest.mark.asyncio
async def test_profile_merges_styler_record(api_client, factory) -> None:
    styler = await factory.styler(gender="male", skin_tone="tan")

    response = await api_client.get("/api/auth/profile", headers=headers(styler))

    assert response.status_code == 200
    assert response.json() == {
        "user": {
            "id": styler.id,
            "email": styler.email,
            "role": "styler",
            "isApproved": True,
            "name": styler.styler.name,
            "gender": "male",
            "skinTone": "tan",
        }
    }


@pytest.mark.asyncio
async def test_profile_merges_partner_record(api_client, factory) -> None:
    partner = await factory.partner(name="Loom", phone=None)

    user = (await api_client.get("/api/auth/profile", headers=headers(partner))).json()["user"]

    assert (user["name"], user["location"]) == ("Loom", "Colombo")
    assert "phone" not in user


@pytest.mark.asyncio
async def test_profile_requires_a_caller(api_client) -> None:
    response = await api_client.get("/api/auth/profile")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_rejects_pending_partner(api_client, factory) -> None:
    admin = await factory.admin()
    pending = await factory.partner(approved=False)
    approved = await factory.partner()

    rejected = await api_client.post(f"/api/admin/users/{pending.id}/reject", headers=headers(admin))
    refused = await api_client.post(f"/api/admin/users/{approved.id}/reject", headers=headers(admin))
    queue = await api_client.get("/api/admin/users/pending", headers=headers(admin))

    assert rejected.json() == {"message": "User rejected and removed successfully"}
    assert refused.status_code == 400
    assert refused.json() == {"error": "Cannot reject an already approved user"}
    assert queue.json() == []


@pytest.mark.asyncio
async def test_reject_is_admin_only(api_client, factory) -> None:
    styler = await factory.styler()
    pending = await factory.partner(approved=False)

    response = await api_client.post(f"/api/admin/users/{pending.id}/reject", headers=headers(styler))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_analytics_counts_accounts(api_client, factory) -> None:
    admin = await factory.admin()
    await factory.styler()
    await factory.partner(approved=False)

    response = await api_client.get("/api/admin/analytics", headers=headers(admin))

    body = response.json()
    assert (body["totalUsers"], body["totalStylists"], body["totalPartners"]) == (3, 1, 1)
    assert body["pendingApprovals"] == 1
    assert [week["week"] for week in body["weeklyTrend"]] == ["Week 1", "Week 2", "Week 3", "Week 4"]
    assert body["weeklyTrend"][-1]["registrations"] == 3


@pytest.mark.asyncio
async def test_partner_analytics_lists_inventories(api_client, factory) -> None:
    admin = await factory.admin()
    partner = await factory.partner(name="Loom", location=None)
    garment = await factory.garment(partner, name="Sari", occasions=["wedding"])

    response = await api_client.get("/api/admin/partners/analytics", headers=headers(admin))

    body = response.json()
    assert body["count"] == 1
    listing = body["partners"][0]
    assert (listing["id"], listing["location"], listing["totalClothes"]) == (partner.id, "Not specified", 1)
    assert listing["clothes"][0]["id"] == garment.id
    assert listing["clothes"][0]["occasion"] == ["wedding"]
