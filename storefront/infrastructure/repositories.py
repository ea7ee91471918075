from datetime import datetime

from pydantic import BaseModel, field_validator
from sqlalchemy import (
    Row,
    Table,
    and_,
    delete,
    func,
    insert,
    inspect,
    or_,
    select,
    text,
    update,
)
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.models import (
    Address,
    AutoDeliveryError,
    AutoDeliveryLogEntry,
    Order,
    OrderStatusEnum,
)
from storefront.infrastructure.db_schema import (
    addresses_tbl,
    auth_tokens_tbl,
    auto_delivery_errors_tbl,
    auto_delivery_logs_tbl,
    orders_tbl,
)


class DoesNotExist(Exception):
    pass


async def _has_table(session: AsyncSession, table: Table) -> bool:
    conn = await session.connection()
    return await conn.run_sync(
        lambda sync_conn: inspect(sync_conn).has_table(table.name)
    )


async def _create_table(session: AsyncSession, table: Table) -> None:
    conn = await session.connection()
    await conn.run_sync(table.create, checkfirst=True)


def db_clock(dialect_name: str):
    """Clock that naive timestamp columns are written with on the given dialect."""
    if dialect_name == "postgresql":
        return func.localtimestamp()
    return func.now()


class OrderRepository:
    class CreateDTO(BaseModel):
        id: int | None = None
        order_number: str
        status: OrderStatusEnum
        customer_email: str | None = None
        shipped_at: datetime | None = None
        delivered_at: datetime | None = None

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _construct(row: Row | None) -> Order:
        if row is None:
            raise DoesNotExist

        return Order(
            id=row._mapping["id"],
            order_number=row._mapping["order_number"],
            status=row._mapping["status"],
            customer_email=row._mapping["customer_email"],
            shipped_at=row._mapping["shipped_at"],
            delivered_at=row._mapping.get("delivered_at"),
        )

    async def create(self, order: CreateDTO) -> Order:
        stmt = (
            insert(orders_tbl)
            .values(order.model_dump(exclude_none=True))
            .returning(*orders_tbl.c)
        )
        result = await self._session.execute(stmt)

        return self._construct(result.fetchone())

    async def get_by_id(self, order_id: int) -> Order:
        stmt = select(orders_tbl).where(orders_tbl.c.id == order_id)
        result = await self._session.execute(stmt)

        return self._construct(result.fetchone())

    async def current_time(self) -> datetime:
        """Current time as seen by the database, on the clock of `shipped_at`."""
        clock = db_clock(self._session.get_bind().dialect.name)
        result = await self._session.execute(select(clock))
        return result.scalar_one()

    async def get_eligible_for_delivery(self, shipped_before: datetime) -> list[Order]:
        """Shipped orders that left the warehouse on or before `shipped_before`, oldest first."""
        stmt = (
            select(
                orders_tbl.c.id,
                orders_tbl.c.order_number,
                orders_tbl.c.shipped_at,
                orders_tbl.c.status,
                orders_tbl.c.customer_email,
            )
            .where(
                and_(
                    orders_tbl.c.status == OrderStatusEnum.SHIPPED,
                    orders_tbl.c.shipped_at.is_not(None),
                    orders_tbl.c.shipped_at <= shipped_before,
                    or_(
                        orders_tbl.c.delivered_at.is_(None),
                        orders_tbl.c.status != OrderStatusEnum.DELIVERED,
                    ),
                )
            )
            .order_by(orders_tbl.c.shipped_at.asc())
        )
        result = await self._session.execute(stmt)

        return [self._construct(row) for row in result.fetchall()]

    async def mark_as_delivered(self, order_id: int) -> bool:
        """Move a shipped order to delivered. False when it is no longer shipped."""
        stmt = (
            update(orders_tbl)
            .where(
                and_(
                    orders_tbl.c.id == order_id,
                    orders_tbl.c.status == OrderStatusEnum.SHIPPED,
                )
            )
            .values(
                status=OrderStatusEnum.DELIVERED,
                delivered_at=func.now(),
                updated_at=func.now(),
            )
        )
        result = await self._session.execute(stmt)

        return result.rowcount == 1


class AutoDeliveryLogRepository:
    class CreateDTO(BaseModel):
        order_id: int
        order_number: str
        customer_email: str | None = None

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _construct(row: Row | None) -> AutoDeliveryLogEntry:
        if row is None:
            raise DoesNotExist

        return AutoDeliveryLogEntry(
            id=row._mapping["id"],
            order_id=row._mapping["order_id"],
            order_number=row._mapping["order_number"],
            customer_email=row._mapping["customer_email"],
            processed_at=row._mapping["processed_at"],
        )

    async def create(self, entry: CreateDTO) -> AutoDeliveryLogEntry:
        stmt = (
            insert(auto_delivery_logs_tbl)
            .values(entry.model_dump())
            .returning(*auto_delivery_logs_tbl.c)
        )
        result = await self._session.execute(stmt)

        return self._construct(result.fetchone())

    async def get_by_order_id(self, order_id: int) -> list[AutoDeliveryLogEntry]:
        stmt = (
            select(auto_delivery_logs_tbl)
            .where(auto_delivery_logs_tbl.c.order_id == order_id)
            .order_by(auto_delivery_logs_tbl.c.id)
        )
        result = await self._session.execute(stmt)

        return [self._construct(row) for row in result.fetchall()]

    async def table_exists(self) -> bool:
        return await _has_table(self._session, auto_delivery_logs_tbl)

    async def ensure_table(self) -> None:
        await _create_table(self._session, auto_delivery_logs_tbl)

    async def get_summary(self) -> tuple[int, datetime | None]:
        """Number of logged deliveries and the time of the latest one."""
        stmt = select(
            func.count().label("total_processed"),
            func.max(auto_delivery_logs_tbl.c.processed_at).label("last_processed"),
        ).select_from(auto_delivery_logs_tbl)
        result = await self._session.execute(stmt)
        row = result.fetchone()

        return int(row.total_processed or 0), row.last_processed


class AutoDeliveryErrorRepository:
    class CreateDTO(BaseModel):
        message: str
        order_id: int | None = None
        order_number: str | None = None

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _construct(row: Row | None) -> AutoDeliveryError:
        if row is None:
            raise DoesNotExist

        return AutoDeliveryError(
            id=row._mapping["id"],
            order_id=row._mapping["order_id"],
            order_number=row._mapping["order_number"],
            message=row._mapping["message"],
            occurred_at=row._mapping["occurred_at"],
        )

    async def create(self, error: CreateDTO) -> AutoDeliveryError:
        stmt = (
            insert(auto_delivery_errors_tbl)
            .values(error.model_dump())
            .returning(*auto_delivery_errors_tbl.c)
        )
        result = await self._session.execute(stmt)

        return self._construct(result.fetchone())

    async def table_exists(self) -> bool:
        return await _has_table(self._session, auto_delivery_errors_tbl)

    async def ensure_table(self) -> None:
        await _create_table(self._session, auto_delivery_errors_tbl)

    async def count(self) -> int:
        stmt = select(func.count()).select_from(auto_delivery_errors_tbl)
        result = await self._session.execute(stmt)

        return int(result.scalar_one() or 0)


class AddressRepository:
    class CreateDTO(BaseModel):
        address_line_1: str
        city: str
        state: str
        postal_code: str
        country: str
        barangay: str | None = None
        shipping_region: str | None = None
        is_default: bool = False

    class UpdateDTO(BaseModel):
        address_line_1: str | None = None
        city: str | None = None
        state: str | None = None
        postal_code: str | None = None
        country: str | None = None
        barangay: str | None = None
        shipping_region: str | None = None
        is_default: bool | None = None

        @field_validator(
            "address_line_1", "city", "state", "postal_code", "country", "is_default"
        )
        @classmethod
        def _not_null(cls, value):
            if value is None:
                raise ValueError("may be omitted but not null")
            return value

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _construct(row: Row | None) -> Address:
        if row is None:
            raise DoesNotExist

        return Address(**row._mapping)

    async def list_for_user(self, user_id: str) -> list[Address]:
        stmt = (
            select(addresses_tbl)
            .where(addresses_tbl.c.user_id == user_id)
            .order_by(addresses_tbl.c.is_default.desc(), addresses_tbl.c.id.desc())
        )
        result = await self._session.execute(stmt)

        return [self._construct(row) for row in result.fetchall()]

    async def get(self, user_id: str, address_id: int) -> Address:
        stmt = select(addresses_tbl).where(
            and_(
                addresses_tbl.c.id == address_id,
                addresses_tbl.c.user_id == user_id,
            )
        )
        result = await self._session.execute(stmt)

        return self._construct(result.fetchone())

    async def count_for_user(self, user_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(addresses_tbl)
            .where(addresses_tbl.c.user_id == user_id)
        )
        result = await self._session.execute(stmt)

        return int(result.scalar_one())

    async def create(self, user_id: str, address: CreateDTO) -> Address:
        stmt = (
            insert(addresses_tbl)
            .values({"user_id": user_id, **address.model_dump()})
            .returning(*addresses_tbl.c)
        )
        result = await self._session.execute(stmt)

        return self._construct(result.fetchone())

    async def update(
        self, user_id: str, address_id: int, changes: UpdateDTO
    ) -> Address:
        values = changes.model_dump(exclude_unset=True)
        if not values:
            return await self.get(user_id, address_id)

        stmt = (
            update(addresses_tbl)
            .where(
                and_(
                    addresses_tbl.c.id == address_id,
                    addresses_tbl.c.user_id == user_id,
                )
            )
            .values({**values, "updated_at": func.now()})
            .returning(*addresses_tbl.c)
        )
        result = await self._session.execute(stmt)

        return self._construct(result.fetchone())

    async def clear_default(self, user_id: str, keep_id: int | None = None) -> None:
        conditions = [
            addresses_tbl.c.user_id == user_id,
            addresses_tbl.c.is_default.is_(True),
        ]
        if keep_id is not None:
            conditions.append(addresses_tbl.c.id != keep_id)

        stmt = update(addresses_tbl).where(and_(*conditions)).values(is_default=False)
        await self._session.execute(stmt)

    async def delete(self, user_id: str, address_id: int) -> None:
        stmt = delete(addresses_tbl).where(
            and_(
                addresses_tbl.c.id == address_id,
                addresses_tbl.c.user_id == user_id,
            )
        )
        result = await self._session.execute(stmt)

        if result.rowcount == 0:
            raise DoesNotExist


class AuthTokenRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_user_id(self, token: str) -> str:
        """User owning a live token."""
        stmt = select(auth_tokens_tbl.c.user_id).where(
            and_(
                auth_tokens_tbl.c.token == token,
                or_(
                    auth_tokens_tbl.c.expires_at.is_(None),
                    auth_tokens_tbl.c.expires_at
                    > db_clock(self._session.get_bind().dialect.name),
                ),
            )
        )
        result = await self._session.execute(stmt)
        user_id = result.scalar_one_or_none()

        if user_id is None:
            raise DoesNotExist

        return user_id


class DatabaseProbe:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def ping(self) -> bool:
        result = await self._session.execute(text("SELECT 1"))
        return result.scalar_one() == 1
