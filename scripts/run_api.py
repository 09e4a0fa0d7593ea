"""Serve the StyleHub API with uvicorn."""

from __future__ import annotations

import uvicorn

from stylehub.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "stylehub.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
