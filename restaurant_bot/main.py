"""
Server entry point.

Usage:
    python -m restaurant_bot.main
"""
from __future__ import annotations

import logging

import uvicorn

from .config import DEFAULT_SERVER_CONFIG, ServerConfig


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main(config: ServerConfig = DEFAULT_SERVER_CONFIG) -> None:
    configure_logging(config.log_level)
    logging.getLogger(__name__).info("Starting LINE bot on port %s", config.port)
    uvicorn.run(
        "restaurant_bot.app:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
