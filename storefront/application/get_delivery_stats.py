import logging

from storefront.core.models import DeliveryStats
from storefront.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class GetDeliveryStatsUseCase:
    def __init__(self, unit_of_work: UnitOfWork):
        self._unit_of_work = unit_of_work

    async def __call__(self) -> DeliveryStats:
        try:
            async with self._unit_of_work() as uow:
                if not await uow.delivery_logs.table_exists():
                    return DeliveryStats()

                total_processed, last_processed = await uow.delivery_logs.get_summary()

                error_count = 0
                if await uow.delivery_errors.table_exists():
                    error_count = await uow.delivery_errors.count()

                return DeliveryStats(
                    total_processed=total_processed,
                    last_processed=last_processed,
                    error_count=error_count,
                )
        except Exception as e:
            logger.error(f"Error getting auto delivery stats: {e}", exc_info=True)
            return DeliveryStats()
