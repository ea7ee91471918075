from contextlib import asynccontextmanager
from typing import Awaitable, Callable
from unittest.mock import MagicMock

import pytest

from storefront.application.get_delivery_stats import GetDeliveryStatsUseCase
from storefront.application.sweep_delivered_orders import SweepDeliveredOrdersUseCase
from storefront.core.models import DeliveryStats, Order
from storefront.infrastructure.db_schema import (
    auto_delivery_errors_tbl,
    auto_delivery_logs_tbl,
)
from storefront.infrastructure.repositories import AutoDeliveryErrorRepository
from storefront.infrastructure.unit_of_work import UnitOfWork


@pytest.fixture
async def stats_use_case(uow: UnitOfWork) -> GetDeliveryStatsUseCase:
    return GetDeliveryStatsUseCase(unit_of_work=uow)


class TestGetDeliveryStatsUseCase:
    @pytest.mark.asyncio
    async def test_missing_log_table_reports_zeros(
        self, stats_use_case: GetDeliveryStatsUseCase, container
    ):
        # Given
        engine = container.infrastructure_container.async_engine()
        async with engine.begin() as conn:
            await conn.run_sync(auto_delivery_logs_tbl.drop)

        # When
        stats = await stats_use_case()

        # Then
        assert stats == DeliveryStats(
            total_processed=0, last_processed=None, error_count=0
        )

    @pytest.mark.asyncio
    async def test_empty_log_reports_zeros(
        self, stats_use_case: GetDeliveryStatsUseCase
    ):
        # Given/When
        stats = await stats_use_case()

        # Then
        assert stats.total_processed == 0
        assert stats.last_processed is None
        assert stats.error_count == 0

    @pytest.mark.asyncio
    async def test_counts_processed_orders(
        self,
        stats_use_case: GetDeliveryStatsUseCase,
        order_factory: Callable[..., Awaitable[Order]],
        uow: UnitOfWork,
    ):
        # Given
        await order_factory()
        await order_factory()
        await SweepDeliveredOrdersUseCase(unit_of_work=uow)()

        # When
        stats = await stats_use_case()

        # Then
        assert stats.total_processed == 2
        assert stats.last_processed is not None
        assert stats.error_count == 0

    @pytest.mark.asyncio
    async def test_counts_recorded_errors(
        self, stats_use_case: GetDeliveryStatsUseCase, uow: UnitOfWork
    ):
        # Given
        async with uow() as unit:
            for order_number in ("ORD-1", "ORD-2"):
                await unit.delivery_errors.create(
                    AutoDeliveryErrorRepository.CreateDTO(
                        message=f"Failed to process order {order_number}: timeout",
                        order_number=order_number,
                    )
                )
            await unit.commit()

        # When
        stats = await stats_use_case()

        # Then
        assert stats.error_count == 2

    @pytest.mark.asyncio
    async def test_missing_error_table_reports_zero_errors(
        self, stats_use_case: GetDeliveryStatsUseCase, container
    ):
        # Given
        engine = container.infrastructure_container.async_engine()
        async with engine.begin() as conn:
            await conn.run_sync(auto_delivery_errors_tbl.drop)

        # When
        stats = await stats_use_case()

        # Then
        assert stats.error_count == 0

    @pytest.mark.asyncio
    async def test_database_failure_reports_zeros(self):
        # Given
        @asynccontextmanager
        async def broken_unit_of_work():
            raise ConnectionError("database unavailable")
            yield

        use_case = GetDeliveryStatsUseCase(
            unit_of_work=MagicMock(side_effect=broken_unit_of_work)
        )

        # When
        stats = await use_case()

        # Then
        assert stats == DeliveryStats()
