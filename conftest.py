from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.application.container import ApplicationContainer
from storefront.core.models import Order, OrderStatusEnum
from storefront.infrastructure.db_schema import auth_tokens_tbl, metadata
from storefront.infrastructure.repositories import OrderRepository
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.presentation import api

CONFIG_PATH = Path(__file__).parent / "storefront" / "config.yaml"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@pytest.fixture()
async def container(tmp_path: Path) -> ApplicationContainer:
    container = ApplicationContainer()
    container.config.from_yaml(CONFIG_PATH, required=True)
    container.config.from_dict(
        {
            "infrastructure": {
                "db": {
                    "dsn": f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}",
                    "pool_size": 5,
                    "pool_recycle": 1800,
                }
            }
        }
    )
    return container


@pytest.fixture()
async def session_factory(
    container: ApplicationContainer,
) -> async_sessionmaker[AsyncSession]:
    return container.infrastructure_container.session_factory()


@pytest_asyncio.fixture()
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def uow(session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWork:
    return UnitOfWork(session_factory)


@pytest.fixture()
def fast_api_app(container: ApplicationContainer):
    app = FastAPI()
    app.include_router(api.router)
    container.wire(modules=[api])
    app.container = container
    yield app
    container.unwire()


@pytest_asyncio.fixture(autouse=True)
async def setup_database(container: ApplicationContainer):
    engine = container.infrastructure_container.async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture()
async def test_async_client(fast_api_app) -> AsyncClient:
    async with AsyncClient(
        transport=ASGITransport(app=fast_api_app),
        base_url="http://test.com",
    ) as client:
        client.app = fast_api_app
        yield client


@pytest.fixture
def order_factory(uow: UnitOfWork):
    counter = iter(range(1, 10_000))

    async def _create_order(**kwargs) -> Order:
        defaults = {
            "order_number": f"ORD-{next(counter):04d}",
            "status": OrderStatusEnum.SHIPPED,
            "customer_email": "customer@example.com",
            "shipped_at": utcnow() - timedelta(days=10),
        }
        defaults.update(kwargs)
        async with uow() as unit:
            order = await unit.orders.create(OrderRepository.CreateDTO(**defaults))
            await unit.commit()
        return order

    return _create_order


@pytest.fixture
def address_payload_factory():
    def _create_payload(**kwargs) -> dict:
        defaults = {
            "address_line_1": "123 Rizal Street",
            "city": "Quezon City",
            "state": "Metro Manila",
            "postal_code": "1100",
            "country": "Philippines",
            "barangay": "Bagong Pag-asa",
            "shipping_region": "NCR",
            "is_default": False,
        }
        defaults.update(kwargs)
        return defaults

    return _create_payload


@pytest.fixture
def auth_headers_factory(session_factory: async_sessionmaker[AsyncSession]):
    async def _create_headers(
        user_id: str, token: str | None = None, expires_at: datetime | None = None
    ) -> dict:
        token = token or f"token-{user_id}"
        async with session_factory() as session:
            await session.execute(
                insert(auth_tokens_tbl).values(
                    token=token, user_id=user_id, expires_at=expires_at
                )
            )
            await session.commit()
        return {"Authorization": f"Bearer {token}"}

    return _create_headers
