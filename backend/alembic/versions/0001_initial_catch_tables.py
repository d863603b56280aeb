"""Initial schema — crate catalog, catch sessions/batches, slaughter tracking.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    # ── Reference data ───────────────────────────────────────

    op.create_table(
        "crate_types",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("length_cm", sa.Float(), nullable=False),
        sa.Column("width_cm", sa.Float(), nullable=False),
        sa.Column("height_cm", sa.Float(), nullable=False),
        sa.Column("tare_weight_kg", sa.Float(), server_default="0"),
        sa.Column("notes", sa.Text()),
        sa.Column("is_active", sa.Boolean(), server_default="true"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    # ── Catch sessions & batch weighing ──────────────────────

    op.create_table(
        "catch_sessions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("flock_id", sa.String(36), nullable=False, index=True),
        sa.Column("catch_date", sa.Date(), nullable=False, index=True),
        sa.Column("catch_team", sa.String(100)),
        sa.Column("weighing_method", sa.String(30), server_default="digital_scale_stack"),
        sa.Column("target_birds", sa.Integer()),
        sa.Column("target_weight", sa.Float()),
        sa.Column("status", sa.String(20), server_default="active", index=True),
        sa.Column("start_time", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("end_time", sa.DateTime()),
        sa.Column("crate_type_id", sa.String(36)),
        sa.Column("transport_duration_hours", sa.Float()),
        sa.Column("season", sa.String(20)),
        sa.Column("planned_standard_density", sa.Integer()),
        sa.Column("planned_standard_crates", sa.Integer()),
        sa.Column("planned_odd_density", sa.Integer()),
        sa.Column("planned_odd_crates", sa.Integer()),
        sa.Column("available_crates", sa.Integer()),
        sa.Column("planned_total_birds", sa.Integer()),
        sa.Column("total_birds_caught", sa.Integer(), server_default="0"),
        sa.Column("total_net_weight", sa.Float(), server_default="0"),
        sa.Column("total_crates", sa.Integer(), server_default="0"),
        sa.Column("average_bird_weight", sa.Float(), server_default="0"),
        sa.Column("last_batch_number", sa.Integer(), server_default="0"),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "catch_batches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("session_id", sa.String(36), sa.ForeignKey("catch_sessions.id"), nullable=False, index=True),
        sa.Column("crate_type_id", sa.String(36), sa.ForeignKey("crate_types.id"), nullable=False),
        sa.Column("batch_number", sa.Integer(), nullable=False),
        sa.Column("number_of_crates", sa.Integer(), nullable=False),
        sa.Column("birds_per_crate", sa.Integer(), nullable=False),
        sa.Column("total_birds", sa.Integer(), nullable=False),
        sa.Column("total_gross_weight", sa.Float(), nullable=False),
        sa.Column("crate_weight", sa.Float(), nullable=False),
        sa.Column("pallet_weight", sa.Float()),
        sa.Column("total_net_weight", sa.Float(), nullable=False),
        sa.Column("average_bird_weight", sa.Float(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_catch_batches_session_batch_number", "catch_batches",
        ["session_id", "batch_number"], unique=True,
    )

    # ── Slaughter tracking ───────────────────────────────────

    op.create_table(
        "slaughter_batches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("flock_id", sa.String(36), nullable=False, index=True),
        sa.Column("batch_number", sa.String(50), nullable=False),
        sa.Column("start_date", sa.Date(), server_default=sa.func.current_date(), index=True),
        sa.Column("end_date", sa.Date()),
        sa.Column("status", sa.String(30), server_default="in_progress", index=True),
        sa.Column("transport_time_hours", sa.Float()),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "slaughter_catch_records",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "slaughter_batch_id", sa.String(36),
            sa.ForeignKey("slaughter_batches.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column("catch_date", sa.Date(), nullable=False, index=True),
        sa.Column("day_number", sa.Integer(), nullable=False),
        sa.Column("birds_caught", sa.Integer(), nullable=False),
        sa.Column("average_weight_at_farm", sa.Float(), nullable=False),
        sa.Column("feed_removal_hours", sa.Float(), nullable=False),
        sa.Column("transport_time_hours", sa.Float(), nullable=False),
        sa.Column("gut_evacuation_percent", sa.Float(), nullable=False),
        sa.Column("catching_handling_percent", sa.Float(), nullable=False),
        sa.Column("loading_holding_percent", sa.Float(), nullable=False),
        sa.Column("transport_percent", sa.Float(), nullable=False),
        sa.Column("total_shrinkage_percent", sa.Float(), nullable=False),
        sa.Column("estimated_weight_at_slaughterhouse", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "slaughterhouse_records",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "catch_record_id", sa.String(36),
            sa.ForeignKey("slaughter_catch_records.id", ondelete="CASCADE"),
            nullable=False, unique=True, index=True,
        ),
        sa.Column("actual_weight_at_slaughterhouse", sa.Float(), nullable=False),
        sa.Column("variance", sa.Float(), nullable=False),
        sa.Column("variance_percent", sa.Float(), nullable=False),
        sa.Column("slaughterhouse_reference", sa.String(100)),
        sa.Column("received_date", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("slaughterhouse_records")
    op.drop_table("slaughter_catch_records")
    op.drop_table("slaughter_batches")
    op.drop_index("ix_catch_batches_session_batch_number", table_name="catch_batches")
    op.drop_table("catch_batches")
    op.drop_table("catch_sessions")
    op.drop_table("crate_types")
