"""
Maintenance entry point for the storefront cache layer.

    python -m src.main health   # connection health as JSON, exit 1 if unreachable
    python -m src.main flush    # FLUSHALL (maintenance/testing only)
"""
import argparse
import asyncio
import os
import sys
from typing import List, Optional

from src.cache.exceptions import CacheConnectionError
from src.layer import CacheLayer, create_cache_layer
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


async def run_health(layer: CacheLayer) -> int:
    health = await layer.connection.health()
    print(health.model_dump_json())
    return 0 if health.reachable else 1


async def run_flush(layer: CacheLayer) -> int:
    flushed = await layer.store.flush_all()
    logger.info("flush_command_finished", flushed=flushed)
    return 0 if flushed else 1


COMMANDS = {
    "health": run_health,
    "flush": run_flush,
}


async def run(command: str, layer: Optional[CacheLayer] = None) -> int:
    """
    Execute one maintenance command against Redis.

    Args:
        command: "health" or "flush"
        layer: Pre-built layer (default: built from environment)

    Returns:
        Process exit code
    """
    layer = layer or create_cache_layer()
    try:
        return await COMMANDS[command](layer)
    finally:
        try:
            await layer.close()
        except CacheConnectionError as e:
            logger.warning("shutdown_disconnect_failed", error=str(e))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="storefront-cache",
        description="Maintenance commands for the storefront Redis cache",
    )
    parser.add_argument("command", choices=sorted(COMMANDS))
    args = parser.parse_args(argv)

    log_level = os.getenv("LOG_LEVEL", "INFO")
    setup_logging(level=log_level)

    logger.info(
        "maintenance_command_starting",
        command=args.command,
        environment=os.getenv("ENVIRONMENT", "production"),
    )

    return asyncio.run(run(args.command))


if __name__ == "__main__":
    sys.exit(main())
