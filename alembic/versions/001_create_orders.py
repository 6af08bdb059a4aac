"""001: create orders table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(32)     PRIMARY KEY,
            customer_id         VARCHAR(64)     NOT NULL,
            items               JSONB           NOT NULL,
            total_amount        NUMERIC(12, 2)  NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            shipping_address    JSONB           NOT NULL,
            payment_method      VARCHAR(20)     NOT NULL,
            payment_status      VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            tracking_number     VARCHAR(100),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_total_amount_gte_0 CHECK (total_amount >= 0),
            CONSTRAINT ck_orders_items_not_empty    CHECK (jsonb_array_length(items) > 0),
            CONSTRAINT ck_orders_status             CHECK (
                status IN ('PENDING', 'PROCESSING', 'SHIPPED', 'DELIVERED', 'CANCELLED')
            ),
            CONSTRAINT ck_orders_payment_method     CHECK (
                payment_method IN ('CREDIT_CARD', 'DEBIT_CARD', 'PAYPAL', 'BANK_TRANSFER')
            ),
            CONSTRAINT ck_orders_payment_status     CHECK (
                payment_status IN ('PENDING', 'COMPLETED', 'FAILED', 'REFUNDED')
            )
        );
    """)
    op.execute("CREATE INDEX ix_orders_customer_id ON orders (customer_id);")
    op.execute(
        "CREATE INDEX idx_orders_customer_status_created "
        "ON orders (customer_id, status, created_at DESC);"
    )
    op.execute("CREATE INDEX idx_orders_status_created ON orders (status, created_at DESC);")
    op.execute("COMMENT ON TABLE orders IS 'Customer orders; items and shipping address as JSONB';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
