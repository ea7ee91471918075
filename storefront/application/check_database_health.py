import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from storefront.core.models import HealthReport
from storefront.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CheckDatabaseHealthUseCase:
    def __init__(self, unit_of_work: UnitOfWork, async_engine: AsyncEngine):
        self._unit_of_work = unit_of_work
        self._async_engine = async_engine

    async def __call__(self) -> HealthReport:
        try:
            async with self._unit_of_work() as uow:
                connected = await uow.probe.ping()
        except Exception as e:
            logger.error(f"Database health check failed: {e}", exc_info=True)
            return HealthReport(
                success=False,
                database_connected=False,
                error=str(e) or "Unknown error",
            )

        if not connected:
            return HealthReport(success=False, database_connected=False)

        # Only non-secret connection details
        url = self._async_engine.url
        return HealthReport(
            success=True,
            database_connected=True,
            host=url.host,
            database=url.database,
        )
