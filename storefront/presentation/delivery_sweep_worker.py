import asyncio
import logging

from storefront.application.sweep_delivered_orders import SweepDeliveredOrdersUseCase

logger = logging.getLogger(__name__)


class DeliverySweepWorker:
    def __init__(
        self,
        use_case: SweepDeliveredOrdersUseCase,
        interval_seconds: float = 3600,
    ):
        self._use_case = use_case
        self._interval_seconds = interval_seconds

    async def run_once(self):
        result = await self._use_case()
        if result.errors:
            logger.warning(
                f"Auto delivery sweep finished with {len(result.errors)} errors"
            )
        return result

    async def run(self):
        while True:
            await self.run_once()
            await asyncio.sleep(self._interval_seconds)
