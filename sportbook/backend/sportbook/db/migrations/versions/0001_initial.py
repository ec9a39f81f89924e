from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_ONLY = sa.text("status IN ('pending', 'confirmed')")


def upgrade() -> None:
    bind = op.get_bind()

    user_role = postgresql.ENUM("user", "admin", name="userrole", create_type=False)
    user_role.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32)),
        sa.Column("role", user_role, server_default="user"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    venue_type = postgresql.ENUM(
        "football",
        "basketball",
        "tennis",
        "volleyball",
        "badminton",
        "table_tennis",
        "other",
        name="venuetype",
        create_type=False,
    )
    venue_type.create(bind, checkfirst=True)

    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", venue_type, nullable=False),
        sa.Column("address", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("price_per_hour", sa.Numeric(10, 2), nullable=False),
        sa.Column("image_url", sa.String(length=500)),
        sa.Column("amenities", sa.JSON()),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("price_per_hour > 0", name="ck_venue_price_positive"),
    )
    op.create_index("ix_venues_type", "venues", ["type"])
    op.create_index("ix_venues_is_active", "venues", ["is_active"])

    slot_status = postgresql.ENUM(
        "available", "booked", "blocked", name="slotstatus", create_type=False
    )
    slot_status.create(bind, checkfirst=True)

    op.create_table(
        "slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE")),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("status", slot_status, server_default="available"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_slots_venue_id", "slots", ["venue_id"])
    op.create_index("ix_slots_date", "slots", ["date"])
    op.create_index("ix_slots_venue_date", "slots", ["venue_id", "date"])

    booking_status = postgresql.ENUM(
        "pending", "confirmed", "cancelled", "completed", name="bookingstatus", create_type=False
    )
    booking_status.create(bind, checkfirst=True)
    payment_status = postgresql.ENUM(
        "pending", "paid", "refunded", "failed", name="paymentstatus", create_type=False
    )
    payment_status.create(bind, checkfirst=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column("slot_id", sa.Integer(), sa.ForeignKey("slots.id", ondelete="CASCADE")),
        sa.Column("status", booking_status, server_default="pending"),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_status", payment_status, server_default="pending"),
        sa.Column("refund_amount", sa.Numeric(10, 2)),
        sa.Column("notes", sa.String(length=500)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_slot_id", "bookings", ["slot_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index(
        "uq_booking_active_slot",
        "bookings",
        ["slot_id"],
        unique=True,
        postgresql_where=ACTIVE_ONLY,
        sqlite_where=ACTIVE_ONLY,
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE")),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "venue_id", name="uq_review_user_venue"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating_range"),
    )
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])
    op.create_index("ix_reviews_venue_id", "reviews", ["venue_id"])

    actor_type = postgresql.ENUM("user", "admin", name="actortype", create_type=False)
    actor_type.create(bind, checkfirst=True)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_type", actor_type, nullable=False),
        sa.Column("actor_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])


def downgrade() -> None:
    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_reviews_venue_id", table_name="reviews")
    op.drop_index("ix_reviews_user_id", table_name="reviews")
    op.drop_table("reviews")
    op.drop_index("uq_booking_active_slot", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_slot_id", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_slots_venue_date", table_name="slots")
    op.drop_index("ix_slots_date", table_name="slots")
    op.drop_index("ix_slots_venue_id", table_name="slots")
    op.drop_table("slots")
    op.drop_index("ix_venues_is_active", table_name="venues")
    op.drop_index("ix_venues_type", table_name="venues")
    op.drop_table("venues")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    bind = op.get_bind()
    for name in ("actortype", "paymentstatus", "bookingstatus", "slotstatus", "venuetype", "userrole"):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
