import asyncio
import logging

import uvicorn
from fastapi import FastAPI

from storefront.application.container import ApplicationContainer
from storefront.presentation import api
from storefront.presentation.api import router
from storefront.presentation.container import PresentationContainer
from storefront.presentation.delivery_sweep_worker import DeliverySweepWorker

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_api(container: ApplicationContainer):
    app = FastAPI()
    app.include_router(router)
    container.wire(modules=[api])
    return app


async def main():
    presentation_container = PresentationContainer()
    presentation_container.config.from_yaml("storefront/config.yaml", required=True)

    await presentation_container.application.ensure_delivery_log_tables_use_case()()

    app = build_api(presentation_container.application)

    sweep_worker: DeliverySweepWorker = presentation_container.delivery_sweep_worker()

    logger.info("Starting Storefront Service...")
    api_task = asyncio.create_task(
        uvicorn.Server(
            uvicorn.Config(app, host="0.0.0.0", port=8000, log_level="info")
        ).serve()
    )

    sweep_task = asyncio.create_task(sweep_worker.run())

    await asyncio.gather(api_task, sweep_task)


if __name__ == "__main__":
    asyncio.run(main())
