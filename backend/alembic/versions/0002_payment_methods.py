"""create payment_methods table and seed demo cards

Revision ID: 0002_payment_methods
Revises: 0001_create_campaigns
Create Date: 2026-10-12 10:30:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0002_payment_methods"
down_revision: Union[str, None] = "0001_create_campaigns"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


PAYMENT_METHODS = [
    {"id": "pm_1", "brand": "visa", "last4": "4242", "expiry": "12/25", "is_default": True, "position": 0},
    {"id": "pm_2", "brand": "mastercard", "last4": "5555", "expiry": "10/26", "is_default": False, "position": 1},
]


def upgrade() -> None:
    op.create_table(
        "payment_methods",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("brand", sa.String(32), nullable=False),
        sa.Column("last4", sa.String(4), nullable=False),
        sa.Column("expiry", sa.String(8), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    conn = op.get_bind()
    for method in PAYMENT_METHODS:
        conn.execute(
            sa.text("""
                INSERT INTO payment_methods (id, brand, last4, expiry, is_default, position)
                VALUES (:id, :brand, :last4, :expiry, :is_default, :position)
            """),
            method,
        )


def downgrade() -> None:
    op.drop_table("payment_methods")
