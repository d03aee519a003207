"""Create online_retail_data table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

Creates the single table backing the /products resource. stock_code is the
primary key, which is also the uniqueness constraint that turns duplicate
creates into 400 responses.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "online_retail_data",
        sa.Column("invoice_no", sa.String(32), nullable=False),
        sa.Column(
            "stock_code",
            sa.String(32),
            nullable=False,
            comment="Natural key of the product",
        ),
        sa.Column(
            "description",
            sa.Text(),
            nullable=True,
            comment="The only field mutable after creation",
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column(
            "invoice_date",
            sa.DateTime(timezone=False),
            nullable=True,
            comment="Invoice timestamp (UTC, naive)",
        ),
        sa.Column("unit_price", sa.Float(), nullable=False),
        sa.Column("customer_id", sa.String(32), nullable=False),
        sa.Column("country", sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint("stock_code"),
    )


def downgrade() -> None:
    """Drops the table and every row in it."""
    op.drop_table("online_retail_data")
