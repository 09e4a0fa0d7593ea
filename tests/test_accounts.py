"""Registration, approval and the first-admin bootstrap."""

from __future__ import annotations

import pytest

from stylehub.db import models
from stylehub.services.accounts import AccountService
from stylehub.services.errors import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


@pytest.mark.asyncio
async def test_styler_is_approved_immediately(session) -> None:
    user = await AccountService().register(
        session,
        email=" Nadia@Example.com ",
        role="styler",
        profile={"full_name": "Nadia", "gender": "female", "skin_tone": "medium"},
    )

    assert user.email == "nadia@example.com"
    assert user.is_approved
    assert user.styler.name == "Nadia"
    assert user.styler.skin_tone == "medium"


@pytest.mark.asyncio
async def test_partner_waits_for_approval(session) -> None:
    service = AccountService()
    partner = await service.register(
        session,
        email="shop@example.com",
        role="partner",
        profile={"phone": "+94 77 123 4567", "address": "Galle Road"},
    )

    assert not partner.is_approved
    assert partner.partner.name == "shop"
    assert partner.partner.location == "Galle Road"
    assert [user.id for user in await service.pending(session)] == [partner.id]

    with pytest.raises(ForbiddenError):
        await service.authenticate(session, partner.id)

    await service.approve(session, user_id=partner.id)
    assert (await service.authenticate(session, partner.id)).id == partner.id


@pytest.mark.asyncio
async def test_only_the_first_admin_is_auto_approved(session) -> None:
    service = AccountService()

    first = await service.register(session, email="root@example.com", role="admin")
    second = await service.register(session, email="deputy@example.com", role="admin")

    assert first.is_approved
    assert not second.is_approved
    assert not await service.claim_first_admin(session, second.id)


@pytest.mark.asyncio
async def test_register_rejects_duplicates_and_bad_roles(session) -> None:
    service = AccountService()
    await service.register(session, email="taken@example.com", role="styler")

    with pytest.raises(ValidationError):
        await service.register(session, email="TAKEN@example.com", role="styler")
    with pytest.raises(ValidationError) as error:
        await service.register(session, email="new@example.com", role="owner")
    assert error.value.fields == ["role"]
    with pytest.raises(ValidationError) as error:
        await service.register(session, email="", role="")
    assert error.value.fields == ["email", "role"]


@pytest.mark.asyncio
async def test_register_rejects_unknown_styler_gender(session) -> None:
    with pytest.raises(ValidationError):
        await AccountService().register(
            session, email="x@example.com", role="styler", profile={"gender": "robot"}
        )


@pytest.mark.asyncio
async def test_authenticate_rejects_unknown_callers(session) -> None:
    service = AccountService()

    with pytest.raises(UnauthorizedError):
        await service.authenticate(session, None)
    with pytest.raises(UnauthorizedError):
        await service.authenticate(session, 12345)


@pytest.mark.asyncio
async def test_update_styler_profile(session, factory) -> None:
    styler = await factory.styler(gender="female")
    service = AccountService()

    updated = await service.update_styler_profile(
        session, user_id=styler.id, values={"skin_tone": "olive", "gender": None}
    )

    assert updated.skin_tone == "olive"
    assert updated.gender == "other"

    partner = await factory.partner()
    with pytest.raises(NotFoundError):
        await service.update_styler_profile(session, user_id=partner.id, values={"bio": "hi"})


@pytest.mark.asyncio
async def test_reject_removes_pending_account_and_profile(session, factory) -> None:
    service = AccountService()
    pending = await factory.partner(approved=False)

    await service.reject(session, user_id=pending.id)

    assert await session.get(models.User, pending.id) is None
    assert await session.get(models.Partner, pending.id) is None
    with pytest.raises(NotFoundError):
        await service.reject(session, user_id=pending.id)


@pytest.mark.asyncio
async def test_reject_refuses_approved_accounts(session, factory) -> None:
    styler = await factory.styler()

    with pytest.raises(ValidationError) as error:
        await AccountService().reject(session, user_id=styler.id)

    assert error.value.message == "Cannot reject an already approved user"
