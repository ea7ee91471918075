import logging

from storefront.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class EnsureDeliveryLogTablesUseCase:
    """Create the auto delivery log and error tables when missing. Never raises."""

    def __init__(self, unit_of_work: UnitOfWork):
        self._unit_of_work = unit_of_work

    async def __call__(self) -> None:
        try:
            async with self._unit_of_work() as uow:
                await uow.delivery_logs.ensure_table()
                await uow.delivery_errors.ensure_table()
                await uow.commit()
        except Exception as e:
            logger.error(
                f"Failed to create auto delivery log tables: {e}", exc_info=True
            )
            return

        logger.info("auto_delivery_logs table ready")
