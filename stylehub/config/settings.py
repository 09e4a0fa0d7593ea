"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    api_host: str = "127.0.0.1"
    api_port: int = 8000

    database_url: str = "sqlite+aiosqlite:///./data/stylehub.db"

    aitunnel_api_key: str = ""
    aitunnel_base_url: str = "https://api.aitunnel.ru/v1"
    aitunnel_chat_model: str = "gemini-2.5-flash"
    aitunnel_vision_model: str = "gemini-2.5-flash"
    ai_request_timeout: float = 30.0

    occasion_suggestion_limit: int = 20
    unused_after_days: int = 30
    wear_dedup_policy: str = "allow"

    @property
    def is_production(self) -> bool:
        return self.environment == "prod"


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=_int_env("API_PORT", 8000),
        database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/stylehub.db"),
        aitunnel_api_key=os.getenv("AITUNNEL_API_KEY", ""),
        aitunnel_base_url=os.getenv("AITUNNEL_BASE_URL", "https://api.aitunnel.ru/v1"),
        aitunnel_chat_model=os.getenv("AITUNNEL_CHAT_MODEL", "gemini-2.5-flash"),
        aitunnel_vision_model=os.getenv("AITUNNEL_VISION_MODEL", "gemini-2.5-flash"),
        ai_request_timeout=float(os.getenv("AI_REQUEST_TIMEOUT", "30")),
        occasion_suggestion_limit=_int_env("OCCASION_SUGGESTION_LIMIT", 20),
        unused_after_days=_int_env("UNUSED_AFTER_DAYS", 30),
        wear_dedup_policy=os.getenv("WEAR_DEDUP_POLICY", "allow").strip().lower(),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
