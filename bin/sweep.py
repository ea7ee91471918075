"""Run a single auto delivery sweep. Meant to be triggered by cron."""
import asyncio
import logging
import sys

from storefront.application.container import ApplicationContainer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main() -> int:
    container = ApplicationContainer()
    container.config.from_yaml("storefront/config.yaml", required=True)

    await container.ensure_delivery_log_tables_use_case()()
    result = await container.sweep_delivered_orders_use_case()()

    logger.info(
        f"Processed {result.processed_count} orders: {result.processed_orders}"
    )
    for error in result.errors:
        logger.error(error)

    await container.infrastructure_container.async_engine().dispose()
    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
