"""Initial schema with PostGIS extension and all trip-engine tables.

Revision ID: 001
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


revision = "001"
down_revision = None
branch_labels = None
depends_on = None

TRIP_STATUSES = ("pending", "accepted", "in_progress", "completed", "cancelled")
RIDER_STATUSES = ("online", "offline", "busy")
RULE_KINDS = ("unconditional", "first_ride_only", "min_completed_trips")


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("display_name", sa.String(50), nullable=True),
        sa.Column("phone_number", sa.String(20), unique=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── riders ────────────────────────────────────────────────────────
    op.create_table(
        "riders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("display_name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("rating_average", sa.Float, nullable=True),
        sa.Column(
            "current_location", Geometry("POINT", srid=4326), nullable=True
        ),
        sa.Column(
            "status",
            sa.Enum(*RIDER_STATUSES, name="riderstatus"),
            nullable=False,
            server_default="offline",
        ),
        sa.Column("vehicle_type", sa.String(30), nullable=True),
        sa.Column("license_plate", sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "idx_riders_location",
        "riders",
        ["current_location"],
        postgresql_using="gist",
    )
    op.create_index("idx_riders_status", "riders", ["status"])

    # ── trips ─────────────────────────────────────────────────────────
    op.create_table(
        "trips",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "rider_id", sa.Integer, sa.ForeignKey("riders.id"), nullable=True
        ),
        sa.Column(
            "pickup_location", Geometry("POINT", srid=4326), nullable=False
        ),
        sa.Column("pickup_address", sa.Text, nullable=False),
        sa.Column(
            "destination_location", Geometry("POINT", srid=4326), nullable=False
        ),
        sa.Column("destination_address", sa.Text, nullable=False),
        sa.Column("distance_km", sa.Float, nullable=False),
        sa.Column("estimated_duration_minutes", sa.Integer, nullable=False),
        sa.Column("price_da", sa.Integer, nullable=False),
        sa.Column(
            "status",
            sa.Enum(*TRIP_STATUSES, name="tripstatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "idx_trips_pickup", "trips", ["pickup_location"], postgresql_using="gist"
    )
    op.create_index(
        "idx_trips_destination",
        "trips",
        ["destination_location"],
        postgresql_using="gist",
    )
    op.create_index("idx_trips_user_status", "trips", ["user_id", "status"])
    op.create_index("idx_trips_rider", "trips", ["rider_id"])

    # ── ratings ───────────────────────────────────────────────────────
    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "trip_id",
            sa.Integer,
            sa.ForeignKey("trips.id"),
            unique=True,
            nullable=False,
        ),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "rider_id", sa.Integer, sa.ForeignKey("riders.id"), nullable=False
        ),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_range"),
    )
    op.create_index(
        "idx_ratings_rider_created", "ratings", ["rider_id", "created_at"]
    )

    # ── promotions ────────────────────────────────────────────────────
    op.create_table(
        "promotions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("discount_percentage", sa.Float, nullable=True),
        sa.Column("discount_amount", sa.Float, nullable=True),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "is_active", sa.Boolean, nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "rule_kind", sa.Enum(*RULE_KINDS, name="rulekind"), nullable=True
        ),
        sa.Column("min_completed_trips", sa.Integer, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_promotions_active_until", "promotions", ["is_active", "valid_until"]
    )


def downgrade() -> None:
    op.drop_table("promotions")
    op.drop_table("ratings")
    op.drop_table("trips")
    op.drop_table("riders")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS rulekind")
    op.execute("DROP TYPE IF EXISTS tripstatus")
    op.execute("DROP TYPE IF EXISTS riderstatus")
