#!/usr/bin/env python3
"""
Tourney API Service - Main entry point

This service exposes the tournament, wallet and ledger JSON API over HTTP.
"""
import argparse
import asyncio
import logging
import signal
import sys

import structlog

from tourney_api.config import Config
from tourney_api.service import TourneyAPIService


logger = logging.getLogger(__name__)


def configure_logging(config: Config) -> None:
    """Set up stdlib logging and route structlog through it."""
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # aiohttp access logs are noisy at INFO
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.log_level)
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


async def main(create_tables: bool = False):
    """Main entry point for the Tourney API service.

    Args:
        create_tables: Override config to create tables on startup
    """
    config = Config.from_env()

    if create_tables:
        config.auto_create_tables = True

    configure_logging(config)

    logger.info("Starting Tourney API service")

    service = TourneyAPIService(config)

    # Handle graceful shutdown
    loop = asyncio.get_running_loop()

    def signal_handler(sig):
        logger.info(f"Received signal {sig.name}, shutting down gracefully...")
        asyncio.create_task(service.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler, sig)

    try:
        await service.start()
    except Exception as e:
        logger.error(f"Service failed with error: {e}")
        sys.exit(1)
    finally:
        await service.stop()


def run():
    """Console script entry point."""
    parser = argparse.ArgumentParser(description="Tourney API Service")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create database tables on startup instead of relying on migrations",
    )
    args = parser.parse_args()

    asyncio.run(main(create_tables=args.create_tables))


if __name__ == "__main__":
    run()
