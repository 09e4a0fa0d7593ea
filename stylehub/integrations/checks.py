"""Connectivity checks for the database and the AI provider."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from sqlalchemy import text

from stylehub.db.session import engine
from stylehub.nlp.stylist_client import StylistClient


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        result = await factory()
    except Exception as exc:  # any failure becomes a failed result
        return IntegrationCheckResult(name=name, success=False, message=str(exc))

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_ai_stylist() -> IntegrationCheckResult:
    """Ping the AITunnel API and return the result."""

    async def _ping() -> bool:
        client = StylistClient()
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check(
        name="AITunnel",
        factory=_ping,
        success_message="AITunnel API is reachable.",
    )


async def check_database() -> IntegrationCheckResult:
    """Run a trivial query against the configured database."""

    async def _select_one() -> bool:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            return result.scalar() == 1

    return await _run_check(
        name="Database",
        factory=_select_one,
        success_message="Database is reachable.",
    )


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all integration checks concurrently."""

    return list(await asyncio.gather(check_ai_stylist(), check_database()))
