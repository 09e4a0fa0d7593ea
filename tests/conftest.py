"""Shared fixtures: in-memory database, session and record factories."""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import AsyncIterator, Iterable  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from stylehub.api.main import create_app  # noqa: E402
from stylehub.db import models  # noqa: E402
from stylehub.db.session import get_session  # noqa: E402

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


class Factory:
    """Creates committed records with sensible defaults."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, *objects: object) -> None:
        self._session.add_all(objects)
        await self._session.commit()

    async def styler(
        self,
        *,
        gender: str = "female",
        skin_tone: str | None = None,
        approved: bool = True,
    ) -> models.User:
        index = self._next()
        user = models.User(email=f"styler{index}@example.com", role="styler", is_approved=approved)
        user.styler = models.Styler(name=f"Styler {index}", gender=gender, skin_tone=skin_tone)
        await self._save(user)
        return user

    async def user_without_profile(self, role: str = "styler") -> models.User:
        index = self._next()
        user = models.User(email=f"bare{index}@example.com", role=role, is_approved=True)
        await self._save(user)
        return user

    async def partner(
        self,
        *,
        name: str = "Boutique",
        location: str | None = "Colombo",
        phone: str | None = "+94 11 000 0000",
        approved: bool = True,
    ) -> models.User:
        index = self._next()
        email = f"partner{index}@example.com"
        user = models.User(email=email, role="partner", is_approved=approved)
        user.partner = models.Partner(name=name, email=email, phone=phone, location=location)
        await self._save(user)
        return user

    async def admin(self) -> models.User:
        index = self._next()
        user = models.User(email=f"admin{index}@example.com", role="admin", is_approved=True)
        await self._save(user)
        return user

    async def garment(
        self,
        owner: models.User,
        *,
        name: str | None = None,
        color: str = "black",
        category: str = "dress",
        occasions: Iterable[str] = ("casual",),
        gender: str | None = "unisex",
        skin_tones: Iterable[str] = (),
        visibility: str | None = None,
        usage_count: int = 0,
        price: float = 100.0,
        created_at: datetime | None = None,
    ) -> models.Garment:
        index = self._next()
        owner_kind = "partner" if owner.role == "partner" else "styler"
        garment = models.Garment(
            owner_kind=owner_kind,
            owner_id=owner.id,
            name=name or f"Garment {index}",
            brand="House" if owner_kind == "partner" else None,
            color=color,
            category=category,
            gender=gender,
            price=price,
            visibility=visibility or ("public" if owner_kind == "partner" else "private"),
            usage_count=usage_count,
            created_at=created_at or NOW - timedelta(days=1000 - index),
        )
        garment.occasion_tags = [models.GarmentOccasion(value=value) for value in occasions]
        garment.skin_tone_tags = [models.GarmentSkinTone(value=value) for value in skin_tones]
        await self._save(garment)
        return garment

    async def occasion(
        self,
        owner: models.User,
        *,
        type: str = "wedding",
        title: str = "Cousin's wedding",
        skin_tone: str | None = None,
        date: datetime | None = None,
    ) -> models.Occasion:
        occasion = models.Occasion(
            user_id=owner.id,
            title=title,
            type=type,
            date=date or NOW + timedelta(days=14),
            skin_tone=skin_tone,
        )
        await self._save(occasion)
        return occasion

    async def wear(
        self,
        user: models.User,
        garment: models.Garment,
        worn_at: datetime,
    ) -> models.WearEvent:
        event = models.WearEvent(
            garment_id=garment.id,
            user_id=user.id,
            worn_at=worn_at,
            color=garment.color,
            category=garment.category,
        )
        await self._save(event)
        return event


@pytest.fixture
def factory(session: AsyncSession) -> Factory:
    return Factory(session)


@pytest.fixture
def app(session_factory) -> FastAPI:
    """Application whose request sessions use the test database."""

    app = create_app()

    async def _session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    return app


@pytest_asyncio.fixture
async def api_client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
