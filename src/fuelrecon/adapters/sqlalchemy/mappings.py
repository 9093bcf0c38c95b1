"""SQLAlchemy mapping metadata for the fuelrecon domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
    text,
)
from sqlalchemy.orm import composite, configure_mappers

from fuelrecon.domain.model import (
    CommunityReport,
    Coordinates,
    OperatingHours,
    PriceRecord,
    ReportingCycle,
    ReportVote,
    Station,
    StationStatus,
)
from fuelrecon.domain.time_windows import ensure_aware

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return ensure_aware(value)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class OperatingHoursType(TypeDecorator[OperatingHours]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: OperatingHours | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = {
            "open": value.opens_at,
            "close": value.closes_at,
            "is_24_hours": value.is_24_hours,
            "days_open": list(value.days_open),
        }
        return json.dumps(payload)

    def process_result_value(self, value: str | None, dialect: Dialect) -> OperatingHours | None:
        _ = dialect
        if value is None:
            return None
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return None
        payload = cast(dict[str, Any], loaded)
        return OperatingHours(
            opens_at=payload.get("open"),
            closes_at=payload.get("close"),
            is_24_hours=bool(payload.get("is_24_hours", False)),
            days_open=tuple(str(day) for day in payload.get("days_open") or ()),
        )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Official data ---------------------------------------------------------------

price_record_table = Table(
    "price_record",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("area", String(128), nullable=False),
    Column("brand", String(128), nullable=False),
    Column("fuel_type", String(128), nullable=False),
    Column("min_price", Float, nullable=False, default=0.0),
    Column("max_price", Float, nullable=False, default=0.0),
    Column("common_price", Float, nullable=False, default=0.0),
    Column("period_start", Date, nullable=False),
    Index("ix_price_record_period_start", "period_start"),
    Index("ix_price_record_area_brand", "area", "brand"),
)

station_table = Table(
    "station",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String(255), nullable=False),
    Column("brand", String(128), nullable=False),
    Column("city", String(128), nullable=False),
    Column("address", String(512), nullable=False, default=""),
    Column("latitude", Float, nullable=False),
    Column("longitude", Float, nullable=False),
    Column("amenities", JSON, nullable=False, default=list),
    Column("operating_hours", OperatingHoursType, nullable=True),
    Column("status", Enum(StationStatus, native_enum=False), nullable=False),
    Index("ix_station_city", "city"),
    Index("ix_station_latitude_longitude", "latitude", "longitude"),
)

# Community data --------------------------------------------------------------

community_report_table = Table(
    "community_report",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("station_id", UUIDColumnType, nullable=False),
    Column("fuel_type", String(128), nullable=False),
    Column("price", Float, nullable=False),
    Column("user_id", String(255), nullable=False),
    Column("reported_at", UTCDateTime, nullable=False),
    Column("expires_at", UTCDateTime, nullable=False),
    Column("upvotes", Integer, nullable=False, default=1),
    Column("downvotes", Integer, nullable=False, default=0),
    CheckConstraint("price > 0", name="price_positive"),
    CheckConstraint("upvotes >= 0", name="upvotes_non_negative"),
    CheckConstraint("downvotes >= 0", name="downvotes_non_negative"),
    Index("ix_community_report_station_expires", "station_id", "expires_at"),
)

report_vote_table = Table(
    "report_vote",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "report_id",
        UUIDColumnType,
        ForeignKey("community_report.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("user_id", String(255), nullable=False),
    Column("is_upvote", Boolean, nullable=False),
    Column("voted_at", UTCDateTime, nullable=False),
    UniqueConstraint("report_id", "user_id"),
)

reporting_cycle_table = Table(
    "reporting_cycle",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("start_date", UTCDateTime, nullable=False),
    Column("end_date", UTCDateTime, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("official_import_timestamp", UTCDateTime, nullable=True),
    Column("created_at", UTCDateTime, nullable=False),
    # at most one active cycle
    Index(
        "ix_reporting_cycle_single_active",
        "is_active",
        unique=True,
        sqlite_where=text("is_active = 1"),
        postgresql_where=text("is_active"),
    ),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(PriceRecord, price_record_table)

    mapper_registry.map_imperatively(
        Station,
        station_table,
        properties={
            "coordinates": composite(
                Coordinates,
                station_table.c.latitude,
                station_table.c.longitude,
            ),
        },
    )

    mapper_registry.map_imperatively(CommunityReport, community_report_table)
    mapper_registry.map_imperatively(ReportVote, report_vote_table)
    mapper_registry.map_imperatively(ReportingCycle, reporting_cycle_table)

    configure_mappers()
    return mapper_registry
