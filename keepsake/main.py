"""Keepsake API entry point."""

import asyncio
import logging

from keepsake.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


async def serve() -> None:
    """Run the API server until cancelled."""
    from keepsake.api.server import ApiServer

    server = ApiServer()
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main() -> None:
    """Start the API server on the configured host and port."""
    logger.info("Starting Keepsake (love day %s)...", settings.get_love_day().date())
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Keepsake stopped")


if __name__ == "__main__":
    main()
