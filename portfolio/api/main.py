"""Uvicorn entrypoint for the portfolio API."""

from __future__ import annotations

import uvicorn

from portfolio.api.api_config import get_api_config


def run() -> None:
    config = get_api_config()
    uvicorn.run(
        "portfolio.api.app:app",
        host=config.host,
        port=config.port,
        reload=config.environment == "local",
        log_level="info",
    )


if __name__ == "__main__":
    run()
