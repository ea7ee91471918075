from dependency_injector import containers, providers

from storefront.application.check_database_health import CheckDatabaseHealthUseCase
from storefront.application.ensure_delivery_log_tables import (
    EnsureDeliveryLogTablesUseCase,
)
from storefront.application.get_delivery_stats import GetDeliveryStatsUseCase
from storefront.application.manage_addresses import ManageAddressesUseCase
from storefront.application.sweep_delivered_orders import SweepDeliveredOrdersUseCase
from storefront.infrastructure.container import InfrastructureContainer


class ApplicationContainer(containers.DeclarativeContainer):
    config = providers.Configuration()
    infrastructure_container = providers.Container[InfrastructureContainer](
        InfrastructureContainer,
        config=config.infrastructure,
    )

    sweep_delivered_orders_use_case = providers.Singleton[SweepDeliveredOrdersUseCase](
        SweepDeliveredOrdersUseCase,
        unit_of_work=infrastructure_container.unit_of_work,
        threshold_days=config.sweeper.threshold_days.as_int(),
    )
    get_delivery_stats_use_case = providers.Singleton[GetDeliveryStatsUseCase](
        GetDeliveryStatsUseCase, unit_of_work=infrastructure_container.unit_of_work
    )
    ensure_delivery_log_tables_use_case = providers.Singleton[
        EnsureDeliveryLogTablesUseCase
    ](
        EnsureDeliveryLogTablesUseCase,
        unit_of_work=infrastructure_container.unit_of_work,
    )
    manage_addresses_use_case = providers.Singleton[ManageAddressesUseCase](
        ManageAddressesUseCase, unit_of_work=infrastructure_container.unit_of_work
    )
    check_database_health_use_case = providers.Singleton[CheckDatabaseHealthUseCase](
        CheckDatabaseHealthUseCase,
        unit_of_work=infrastructure_container.unit_of_work,
        async_engine=infrastructure_container.async_engine,
    )
