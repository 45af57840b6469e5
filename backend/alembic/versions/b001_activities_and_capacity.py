"""Activities, users, capacity ledger, booking and payment records

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "activities",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("host_id", sa.String(64), nullable=False),
        sa.Column("host_name", sa.String(256), nullable=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("max_guests_per_time", sa.Integer(), nullable=False),
        sa.Column("max_guests_per_day", sa.Integer(), nullable=False),
        sa.Column("price_per_guest", sa.Numeric(12, 2), nullable=False),
        sa.Column("listing_status", sa.String(16), nullable=False, server_default="List"),
        sa.Column("status", sa.String(16), nullable=False, server_default="Pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activities_host_id", "activities", ["host_id"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(256), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "capacity_days",
        sa.Column("activity_id", sa.String(64), primary_key=True),
        sa.Column("slot_date", sa.Date(), primary_key=True),
        sa.Column("total_guests_for_day", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "capacity_slots",
        sa.Column("activity_id", sa.String(64), primary_key=True),
        sa.Column("slot_date", sa.Date(), primary_key=True),
        sa.Column("slot_id", sa.String(64), primary_key=True),
        sa.Column("total_guests_booked", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "booking_records",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("activity_id", sa.String(64), nullable=False),
        sa.Column("slot_date", sa.Date(), nullable=False),
        sa.Column("slot_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("host_id", sa.String(64), nullable=True),
        sa.Column("requested_guests", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("payment_intent_id", sa.String(128), nullable=False),
        sa.Column("payment_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("host_earnings", sa.Numeric(12, 2), nullable=True),
        sa.Column("platform_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("review_eligible_timestamp", sa.BigInteger(), nullable=False),
        sa.Column("has_feedback", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("feedback_reminder_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("feedback_reminder_sent_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_booking_records_activity_id", "booking_records", ["activity_id"], unique=False)
    op.create_index("ix_booking_records_user_id", "booking_records", ["user_id"], unique=False)
    op.create_index("ix_booking_records_host_id", "booking_records", ["host_id"], unique=False)
    # Feedback reminder job scans by eligibility among unreminded rows
    op.create_index(
        "ix_booking_records_reminder_due",
        "booking_records",
        ["feedback_reminder_sent", "review_eligible_timestamp"],
        unique=False,
    )

    op.create_table(
        "payment_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("payment_intent_id", sa.String(128), nullable=False, unique=True),
        sa.Column("booking_id", sa.String(36), nullable=True),
        sa.Column("activity_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("host_id", sa.String(64), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("host_earnings", sa.Numeric(12, 2), nullable=True),
        sa.Column("platform_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("payment_records")
    op.drop_index("ix_booking_records_reminder_due", table_name="booking_records")
    op.drop_index("ix_booking_records_host_id", table_name="booking_records")
    op.drop_index("ix_booking_records_user_id", table_name="booking_records")
    op.drop_index("ix_booking_records_activity_id", table_name="booking_records")
    op.drop_table("booking_records")
    op.drop_table("capacity_slots")
    op.drop_table("capacity_days")
    op.drop_table("users")
    op.drop_index("ix_activities_host_id", table_name="activities")
    op.drop_table("activities")
