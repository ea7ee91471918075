from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.infrastructure.repositories import (
    AddressRepository,
    AuthTokenRepository,
    AutoDeliveryErrorRepository,
    AutoDeliveryLogRepository,
    DatabaseProbe,
    OrderRepository,
)


class UnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def __call__(self):
        async with self._session_factory() as session:
            try:
                yield _UnitOfWorkImplementation(session)
                # Rollback if commit wasn't explicitly called
                await session.rollback()
            except Exception:
                await session.rollback()
                raise


class _UnitOfWorkImplementation:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._order_repo = OrderRepository(session)
        self._delivery_log_repo = AutoDeliveryLogRepository(session)
        self._delivery_error_repo = AutoDeliveryErrorRepository(session)
        self._address_repo = AddressRepository(session)
        self._auth_token_repo = AuthTokenRepository(session)
        self._probe = DatabaseProbe(session)

    @property
    def orders(self) -> OrderRepository:
        return self._order_repo

    @property
    def delivery_logs(self) -> AutoDeliveryLogRepository:
        return self._delivery_log_repo

    @property
    def delivery_errors(self) -> AutoDeliveryErrorRepository:
        return self._delivery_error_repo

    @property
    def addresses(self) -> AddressRepository:
        return self._address_repo

    @property
    def auth_tokens(self) -> AuthTokenRepository:
        return self._auth_token_repo

    @property
    def probe(self) -> DatabaseProbe:
        return self._probe

    async def commit(self):
        await self._session.commit()
