from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

metadata = MetaData()

orders_tbl = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("order_number", String(50), nullable=False, unique=True),
    Column("status", String(20), nullable=False),
    Column("customer_email", String(255)),
    Column("shipped_at", DateTime),
    Column("delivered_at", DateTime),
    Column("created_at", DateTime, server_default=func.now()),
    Column("updated_at", DateTime, server_default=func.now()),
)

auto_delivery_logs_tbl = Table(
    "auto_delivery_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, nullable=False),
    Column("order_number", String(50), nullable=False),
    Column("customer_email", String(255)),
    Column("processed_at", DateTime, server_default=func.now()),
    Index("idx_order_id", "order_id"),
    Index("idx_order_number", "order_number"),
    Index("idx_processed_at", "processed_at"),
    Index("idx_customer_email", "customer_email"),
)

auto_delivery_errors_tbl = Table(
    "auto_delivery_errors",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer),
    Column("order_number", String(50)),
    Column("message", Text, nullable=False),
    Column("occurred_at", DateTime, server_default=func.now(), index=True),
)

addresses_tbl = Table(
    "addresses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Text, nullable=False, index=True),
    Column("address_line_1", Text, nullable=False),
    Column("city", Text, nullable=False),
    Column("state", Text, nullable=False),
    Column("postal_code", String(20), nullable=False),
    Column("country", Text, nullable=False),
    Column("barangay", Text),
    Column("shipping_region", Text),
    Column("is_default", Boolean, nullable=False, default=False),
    Column("created_at", DateTime, server_default=func.now()),
    Column("updated_at", DateTime, server_default=func.now()),
)

# Written by the auth layer, only read here.
auth_tokens_tbl = Table(
    "auth_tokens",
    metadata,
    Column("token", String(255), primary_key=True),
    Column("user_id", Text, nullable=False, index=True),
    Column("expires_at", DateTime),
)
