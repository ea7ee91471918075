import logging
from datetime import timedelta

from storefront.core.models import Order, SweepResult
from storefront.infrastructure.repositories import (
    AutoDeliveryErrorRepository,
    AutoDeliveryLogRepository,
)
from storefront.infrastructure.unit_of_work import UnitOfWork

DEFAULT_THRESHOLD_DAYS = 7


def _describe(error: Exception) -> str:
    return str(error) or "Unknown error"


class SweepDeliveredOrdersUseCase:
    """
    Mark orders shipped more than `threshold_days` ago as delivered.

    Orders are handled one by one, each transition in its own transaction, so a
    failing order never undoes the others. The audit log and the error ledger are
    written best-effort: their failures are logged and never reach the caller.
    """

    def __init__(
        self,
        unit_of_work: UnitOfWork,
        threshold_days: int = DEFAULT_THRESHOLD_DAYS,
        logger: logging.Logger | None = None,
    ):
        self._unit_of_work = unit_of_work
        self._threshold = timedelta(days=threshold_days)
        self._logger = logger or logging.getLogger(__name__)

    async def __call__(self) -> SweepResult:
        self._logger.info("Checking for orders to mark as delivered")

        try:
            orders = await self._find_eligible_orders()
        except Exception as e:
            self._logger.error(f"Error checking for orders: {e}", exc_info=True)
            message = _describe(e)
            await self._record_errors(
                [AutoDeliveryErrorRepository.CreateDTO(message=message)]
            )
            return SweepResult(errors=[message])

        if not orders:
            self._logger.info("No orders found for automatic delivery marking")
            return SweepResult()

        self._logger.info(f"Found {len(orders)} orders to mark as delivered")

        processed_orders: list[str] = []
        failures: list[AutoDeliveryErrorRepository.CreateDTO] = []

        for order in orders:
            self._logger.info(
                f"Processing order {order.order_number} (shipped on {order.shipped_at})"
            )
            try:
                delivered = await self._mark_as_delivered(order)
            except Exception as e:
                message = f"Failed to process order {order.order_number}: {_describe(e)}"
                self._logger.error(message)
                failures.append(
                    AutoDeliveryErrorRepository.CreateDTO(
                        message=message,
                        order_id=order.id,
                        order_number=order.order_number,
                    )
                )
                continue

            if not delivered:
                self._logger.warning(
                    f"Order {order.order_number} was already updated or not found"
                )
                continue

            self._logger.info(f"Marked order {order.order_number} as delivered")
            processed_orders.append(order.order_number)
            await self._log_delivery(order)

        if failures:
            await self._record_errors(failures)

        self._logger.info(
            f"Completed. Processed {len(processed_orders)} orders, {len(failures)} errors"
        )
        return SweepResult(
            processed_count=len(processed_orders),
            processed_orders=processed_orders,
            errors=[failure.message for failure in failures],
        )

    async def _find_eligible_orders(self) -> list[Order]:
        async with self._unit_of_work() as uow:
            now = await uow.orders.current_time()
            return await uow.orders.get_eligible_for_delivery(
                shipped_before=now - self._threshold
            )

    async def _mark_as_delivered(self, order: Order) -> bool:
        async with self._unit_of_work() as uow:
            delivered = await uow.orders.mark_as_delivered(order.id)
            await uow.commit()
            return delivered

    async def _log_delivery(self, order: Order) -> None:
        try:
            async with self._unit_of_work() as uow:
                await uow.delivery_logs.create(
                    AutoDeliveryLogRepository.CreateDTO(
                        order_id=order.id,
                        order_number=order.order_number,
                        customer_email=order.customer_email,
                    )
                )
                await uow.commit()
        except Exception as e:
            # The order stays delivered
            self._logger.error(
                f"Failed to log auto delivery for order {order.order_number}: {e}",
                exc_info=True,
            )
            return

        self._logger.info(f"Logged automatic delivery for order {order.order_number}")

    async def _record_errors(
        self, errors: list[AutoDeliveryErrorRepository.CreateDTO]
    ) -> None:
        try:
            async with self._unit_of_work() as uow:
                for error in errors:
                    await uow.delivery_errors.create(error)
                await uow.commit()
        except Exception as e:
            self._logger.error(f"Failed to record sweep errors: {e}", exc_info=True)
