"""Create lodgings, experiences, reservations and payments

Revision ID: 3f9a1c2d7b10
Revises:
Create Date: 2025-06-02 10:12:31.418204

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]
from booking_service.config import SCHEMA

# revision identifiers, used by Alembic.
revision = "3f9a1c2d7b10"
down_revision = None
branch_labels = None
depends_on = None


def _fk(table_column: str) -> str:
    return f"{SCHEMA}.{table_column}" if SCHEMA else table_column


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "lodgings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("price_per_night", sa.Numeric(10, 2), nullable=False),
        schema=SCHEMA,
    )

    op.create_table(
        "experiences",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("remaining_capacity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("experience_date", sa.Date(), nullable=True),
        sa.CheckConstraint("remaining_capacity >= 0", name="ck_experiences_remaining_capacity"),
        schema=SCHEMA,
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("requester_id", sa.Integer(), nullable=False),
        sa.Column("lodging_id", sa.Integer(), sa.ForeignKey(_fk("lodgings.id")), nullable=True),
        sa.Column(
            "experience_id", sa.Integer(), sa.ForeignKey(_fk("experiences.id")), nullable=True
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("party_size", sa.Integer(), nullable=False),
        sa.Column("state", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.CheckConstraint("party_size >= 1", name="ck_reservations_party_size"),
        sa.CheckConstraint(
            "(lodging_id IS NULL) <> (experience_id IS NULL)",
            name="ck_reservations_single_target",
        ),
        sa.CheckConstraint(
            "end_date IS NULL OR start_date < end_date", name="ck_reservations_date_order"
        ),
        schema=SCHEMA,
    )
    for column in ("requester_id", "lodging_id", "experience_id"):
        op.create_index(
            f"ix_reservations_{column}", "reservations", [column], schema=SCHEMA
        )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "reservation_id",
            sa.Integer(),
            sa.ForeignKey(_fk("reservations.id"), ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("method", sa.String(32), nullable=False),
        sa.Column("external_reference", sa.String(128), nullable=True),
        sa.Column("state", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount >= 0", name="ck_payments_amount"),
        schema=SCHEMA,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("payments", schema=SCHEMA)
    for column in ("experience_id", "lodging_id", "requester_id"):
        op.drop_index(f"ix_reservations_{column}", table_name="reservations", schema=SCHEMA)
    op.drop_table("reservations", schema=SCHEMA)
    op.drop_table("experiences", schema=SCHEMA)
    op.drop_table("lodgings", schema=SCHEMA)
