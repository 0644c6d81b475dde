"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Pickup points
    op.create_table(
        "pvz",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("registration_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("city", sa.String(50), nullable=False),
        sa.CheckConstraint("city IN ('Moscow', 'Saint Petersburg', 'Kazan')", name="ck_pvz_city"),
    )

    # Receptions
    op.create_table(
        "receptions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("reception_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("pvz_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("pvz.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.CheckConstraint("status IN ('in_progress', 'closed')", name="ck_receptions_status"),
    )
    op.create_index("ix_receptions_pvz_time", "receptions", ["pvz_id", "reception_time"])
    op.create_index(
        "uq_receptions_pvz_in_progress",
        "receptions",
        ["pvz_id"],
        unique=True,
        postgresql_where=sa.text("status = 'in_progress'"),
    )

    # Products
    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("adding_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("product_type", sa.String(50), nullable=False),
        sa.Column("reception_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("receptions.id", ondelete="CASCADE"), nullable=False),
        sa.CheckConstraint("product_type IN ('electronics', 'clothes', 'shoes')", name="ck_products_type"),
    )
    op.create_index("ix_products_reception_time", "products", ["reception_id", "adding_time"])

    # Users
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(128), nullable=False, server_default=""),
        sa.Column("role", sa.String(20), nullable=False),
        sa.CheckConstraint("role IN ('employee', 'moderator')", name="ck_users_role"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_products_reception_time", table_name="products")
    op.drop_table("products")
    op.drop_index("uq_receptions_pvz_in_progress", table_name="receptions")
    op.drop_index("ix_receptions_pvz_time", table_name="receptions")
    op.drop_table("receptions")
    op.drop_table("pvz")
