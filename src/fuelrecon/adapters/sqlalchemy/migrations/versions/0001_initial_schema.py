"""Initial schema: official prices, stations, community reports, votes, cycles.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from fuelrecon.adapters.sqlalchemy.mappings import OperatingHoursType, UTCDateTime

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "price_record",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("area", sa.String(length=128), nullable=False),
        sa.Column("brand", sa.String(length=128), nullable=False),
        sa.Column("fuel_type", sa.String(length=128), nullable=False),
        sa.Column("min_price", sa.Float(), nullable=False),
        sa.Column("max_price", sa.Float(), nullable=False),
        sa.Column("common_price", sa.Float(), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_price_record")),
    )
    op.create_index("ix_price_record_period_start", "price_record", ["period_start"])
    op.create_index("ix_price_record_area_brand", "price_record", ["area", "brand"])

    op.create_table(
        "station",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("brand", sa.String(length=128), nullable=False),
        sa.Column("city", sa.String(length=128), nullable=False),
        sa.Column("address", sa.String(length=512), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("amenities", sa.JSON(), nullable=False),
        sa.Column("operating_hours", OperatingHoursType(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "ACTIVE",
                "INACTIVE",
                "TEMPORARILY_CLOSED",
                "PERMANENTLY_CLOSED",
                name="stationstatus",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_station")),
    )
    op.create_index("ix_station_city", "station", ["city"])
    op.create_index("ix_station_latitude_longitude", "station", ["latitude", "longitude"])

    op.create_table(
        "community_report",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("station_id", sa.Uuid(), nullable=False),
        sa.Column("fuel_type", sa.String(length=128), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("reported_at", UTCDateTime(), nullable=False),
        sa.Column("expires_at", UTCDateTime(), nullable=False),
        sa.Column("upvotes", sa.Integer(), nullable=False),
        sa.Column("downvotes", sa.Integer(), nullable=False),
        sa.CheckConstraint("price > 0", name=op.f("ck_community_report_price_positive")),
        sa.CheckConstraint(
            "upvotes >= 0", name=op.f("ck_community_report_upvotes_non_negative")
        ),
        sa.CheckConstraint(
            "downvotes >= 0", name=op.f("ck_community_report_downvotes_non_negative")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_community_report")),
    )
    op.create_index(
        "ix_community_report_station_expires",
        "community_report",
        ["station_id", "expires_at"],
    )

    op.create_table(
        "report_vote",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("report_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("is_upvote", sa.Boolean(), nullable=False),
        sa.Column("voted_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["report_id"],
            ["community_report.id"],
            name=op.f("fk_report_vote_report_id_community_report"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_report_vote")),
        sa.UniqueConstraint(
            "report_id", "user_id", name=op.f("uq_report_vote_report_vote_report_id")
        ),
    )

    op.create_table(
        "reporting_cycle",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("start_date", UTCDateTime(), nullable=False),
        sa.Column("end_date", UTCDateTime(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("official_import_timestamp", UTCDateTime(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_reporting_cycle")),
    )
    op.create_index(
        "ix_reporting_cycle_single_active",
        "reporting_cycle",
        ["is_active"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active"),
    )


def downgrade() -> None:
    op.drop_index("ix_reporting_cycle_single_active", table_name="reporting_cycle")
    op.drop_table("reporting_cycle")
    op.drop_table("report_vote")
    op.drop_index("ix_community_report_station_expires", table_name="community_report")
    op.drop_table("community_report")
    op.drop_index("ix_station_latitude_longitude", table_name="station")
    op.drop_index("ix_station_city", table_name="station")
    op.drop_table("station")
    op.drop_index("ix_price_record_area_brand", table_name="price_record")
    op.drop_index("ix_price_record_period_start", table_name="price_record")
    op.drop_table("price_record")
