"""Initial schema: trains, schedules, issued_tickets, bookings.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Train routes (catalog-owned)
    op.create_table(
        "trains",
        sa.Column("train_number", sa.String(20), primary_key=True),
        sa.Column("train_name", sa.String(255), nullable=False),
        sa.Column("source", sa.String(100), nullable=False),
        sa.Column("destination", sa.String(100), nullable=False),
        sa.Column("departure_time", sa.String(5), nullable=False),
        sa.Column("journey_duration", sa.String(5), nullable=False),
        sa.Column("total_ac_seats", sa.Integer(), nullable=False),
        sa.Column("total_sleeper_seats", sa.Integer(), nullable=False),
        sa.Column("ac_fare", sa.Numeric(10, 2), nullable=False),
        sa.Column("sleeper_fare", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("total_ac_seats >= 0", name="check_train_ac_seats_non_negative"),
        sa.CheckConstraint("total_sleeper_seats >= 0", name="check_train_sleeper_seats_non_negative"),
        sa.CheckConstraint("ac_fare >= 0", name="check_train_ac_fare_non_negative"),
        sa.CheckConstraint("sleeper_fare >= 0", name="check_train_sleeper_fare_non_negative"),
    )

    # Schedules: one seat pool per train per date
    op.create_table(
        "schedules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("train_number", sa.String(20), sa.ForeignKey("trains.train_number"), nullable=False),
        sa.Column("departure_date", sa.Date(), nullable=False),
        sa.Column("ac_capacity", sa.Integer(), nullable=False),
        sa.Column("sleeper_capacity", sa.Integer(), nullable=False),
        sa.Column("ac_available", sa.Integer(), nullable=False),
        sa.Column("sleeper_available", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        # A second row for the same train and day would be a second, independent seat pool
        sa.UniqueConstraint("train_number", "departure_date", name="uq_schedule_train_date"),
        sa.CheckConstraint("ac_available >= 0", name="check_ac_available_non_negative"),
        sa.CheckConstraint("sleeper_available >= 0", name="check_sleeper_available_non_negative"),
        sa.CheckConstraint("ac_available <= ac_capacity", name="check_ac_available_lte_capacity"),
        sa.CheckConstraint("sleeper_available <= sleeper_capacity", name="check_sleeper_available_lte_capacity"),
    )
    # Listing filters on departure_date >= today
    op.create_index("ix_schedules_departure_date", "schedules", ["departure_date"])

    # Ticket ledger: append-only, so ids are never reissued after cancellation
    op.create_table(
        "issued_tickets",
        sa.Column("ticket_id", sa.String(32), primary_key=True),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # Live bookings
    op.create_table(
        "bookings",
        sa.Column("ticket_id", sa.String(32), sa.ForeignKey("issued_tickets.ticket_id"), primary_key=True),
        sa.Column("owner", sa.String(100), nullable=False),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("schedules.id"), nullable=False),
        sa.Column("seat_class", sa.String(10), nullable=False),
        sa.Column("seat_count", sa.Integer(), nullable=False),
        sa.Column("total_fare", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("seat_count > 0", name="check_booking_seat_count_positive"),
        sa.CheckConstraint("total_fare >= 0", name="check_booking_total_fare_non_negative"),
        sa.CheckConstraint("seat_class IN ('AC', 'Sleeper')", name="check_booking_seat_class"),
    )
    # "My bookings" is always owner + creation order
    op.create_index("ix_bookings_owner_created_at", "bookings", ["owner", "created_at"])
    op.create_index("ix_bookings_schedule_id", "bookings", ["schedule_id"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("issued_tickets")
    op.drop_table("schedules")
    op.drop_table("trains")
