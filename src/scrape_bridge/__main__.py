"""Run the bridge with Uvicorn: ``python -m scrape_bridge``."""

from __future__ import annotations

import uvicorn

from scrape_bridge.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "scrape_bridge.api.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
