from dependency_injector import containers, providers

from storefront.application.container import ApplicationContainer
from storefront.presentation.delivery_sweep_worker import DeliverySweepWorker


class PresentationContainer(containers.DeclarativeContainer):
    config = providers.Configuration()
    application = providers.Container[ApplicationContainer](
        ApplicationContainer, config=config
    )

    delivery_sweep_worker = providers.Singleton[DeliverySweepWorker](
        DeliverySweepWorker,
        use_case=application.sweep_delivered_orders_use_case,
        interval_seconds=config.sweeper.interval_seconds.as_float(),
    )
