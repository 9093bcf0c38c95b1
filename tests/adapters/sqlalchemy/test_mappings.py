from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
from sqlalchemy import inspect, select, text
from sqlalchemy.exc import StatementError

from fuelrecon.adapters.sqlalchemy import start_mappers
from fuelrecon.adapters.sqlalchemy.mappings import station_table
from fuelrecon.domain.model import (
    CommunityReport,
    Coordinates,
    OperatingHours,
    Station,
    StationStatus,
)
from tests.helpers.fuel import NOW, make_report

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def test_start_mappers_is_idempotent() -> None:
    # First invocation happens in the sqlite_engine fixture; calling again should be harmless.
    start_mappers()
    start_mappers()


def test_migrations_create_every_table(sqlite_engine: Engine) -> None:
    inspector = inspect(sqlite_engine)

    assert {
        "price_record",
        "station",
        "community_report",
        "report_vote",
        "reporting_cycle",
        "alembic_version",
    } <= set(inspector.get_table_names())
    index_names = {index["name"] for index in inspector.get_indexes("reporting_cycle")}
    assert "ix_reporting_cycle_single_active" in index_names
    with sqlite_engine.connect() as connection:
        version = connection.execute(text("SELECT version_num FROM alembic_version")).scalar()
    assert version == "0001"


def test_station_round_trip(sqlite_session: Session) -> None:
    station = Station(
        name="Seaoil Buendia",
        brand="Seaoil",
        city="Makati City",
        coordinates=Coordinates(14.5606, 121.0153),
        address="Sen. Gil Puyat Ave",
        amenities=["restroom", "air"],
        operating_hours=OperatingHours(
            opens_at="06:00", closes_at="22:00", days_open=("Mon", "Tue")
        ),
        status=StationStatus.TEMPORARILY_CLOSED,
    )
    sqlite_session.add(station)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = sqlite_session.get(Station, station.id)

    assert loaded is not None
    assert loaded.coordinates == Coordinates(14.5606, 121.0153)
    assert loaded.amenities == ["restroom", "air"]
    assert loaded.operating_hours == OperatingHours(
        opens_at="06:00", closes_at="22:00", days_open=("Mon", "Tue")
    )
    assert loaded.status is StationStatus.TEMPORARILY_CLOSED
    raw_status = sqlite_session.execute(select(station_table.c.status)).scalar_one()
    assert raw_status is StationStatus.TEMPORARILY_CLOSED


def test_station_without_operating_hours(sqlite_session: Session) -> None:
    station = Station(
        name="Unioil Pasong Tamo",
        brand="Unioil",
        city="Makati City",
        coordinates=Coordinates(14.55, 121.01),
    )
    sqlite_session.add(station)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = sqlite_session.get(Station, station.id)

    assert loaded is not None
    assert loaded.operating_hours is None
    assert loaded.amenities == []
    assert loaded.status is StationStatus.ACTIVE


def test_report_timestamps_come_back_in_utc(sqlite_session: Session) -> None:
    report = make_report(uuid4(), validity=timedelta(hours=12))
    sqlite_session.add(report)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = sqlite_session.get(CommunityReport, report.id)

    assert loaded is not None
    assert loaded.reported_at == NOW
    assert loaded.expires_at == NOW + timedelta(hours=12)
    assert loaded.reported_at.tzinfo is not None


def test_naive_timestamps_are_refused(sqlite_session: Session) -> None:
    report = make_report(uuid4())
    report.reported_at = report.reported_at.replace(tzinfo=None)
    sqlite_session.add(report)

    with pytest.raises(StatementError, match="timezone"):
        sqlite_session.commit()
    sqlite_session.rollback()

    assert sqlite_session.get(CommunityReport, report.id) is None
