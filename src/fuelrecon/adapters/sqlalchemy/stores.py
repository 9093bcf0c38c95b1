"""Price and station stores reading from the local database."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from fuelrecon.adapters.sqlalchemy.mappings import price_record_table, station_table
from fuelrecon.domain.errors import UpstreamUnavailableError
from fuelrecon.domain.geo import bounding_box, distance_km
from fuelrecon.domain.model import PriceRecord, Station

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator
    from uuid import UUID

    from sqlalchemy.orm import Session

    from fuelrecon.domain.model import Coordinates

log = logging.getLogger(__name__)

type SessionFactory = Callable[[], Session]


@contextmanager
def _session_scope(session_factory: SessionFactory, source: str) -> Iterator[Session]:
    """One short-lived session per store call; database errors surface as upstream errors."""

    session = session_factory()
    try:
        yield session
    except SQLAlchemyError as exc:
        session.rollback()
        raise UpstreamUnavailableError(source, str(exc)) from exc
    finally:
        session.close()


class SqlAlchemyPriceStore:
    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    def latest_records(self) -> list[PriceRecord]:
        with _session_scope(self.session_factory, "price_record") as session:
            latest = session.execute(select(func.max(price_record_table.c.period_start))).scalar()
            if latest is None:
                return []
            stmt = select(PriceRecord).where(price_record_table.c.period_start == latest)
            return list(session.execute(stmt).scalars())

    def records_for(self, area: str, brand: str) -> list[PriceRecord]:
        stmt = (
            select(PriceRecord)
            .where(func.lower(price_record_table.c.area) == area.strip().lower())
            .where(func.lower(price_record_table.c.brand) == brand.strip().lower())
            .order_by(price_record_table.c.period_start.desc())
        )
        with _session_scope(self.session_factory, "price_record") as session:
            return list(session.execute(stmt).scalars())

    def recent_periods(self, periods: int) -> list[PriceRecord]:
        if periods <= 0:
            return []
        period_stmt = (
            select(price_record_table.c.period_start)
            .distinct()
            .order_by(price_record_table.c.period_start.desc())
            .limit(periods)
        )
        with _session_scope(self.session_factory, "price_record") as session:
            recent = list(session.execute(period_stmt).scalars())
            if not recent:
                return []
            stmt = (
                select(PriceRecord)
                .where(price_record_table.c.period_start.in_(recent))
                .order_by(price_record_table.c.period_start.desc())
            )
            return list(session.execute(stmt).scalars())

    def ingest_batch(self, records: Iterable[PriceRecord]) -> int:
        """Store one official batch; returns the number of records written."""

        batch = list(records)
        with _session_scope(self.session_factory, "price_record") as session:
            session.add_all(batch)
            session.commit()
        log.info("Ingested %s official price records", len(batch))
        return len(batch)


class SqlAlchemyStationStore:
    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    def get(self, station_id: UUID) -> Station | None:
        with _session_scope(self.session_factory, "station") as session:
            return session.get(Station, station_id)

    def by_city(self, city: str) -> list[Station]:
        stmt = (
            select(Station)
            .where(func.lower(station_table.c.city) == city.strip().lower())
            .order_by(station_table.c.name)
        )
        with _session_scope(self.session_factory, "station") as session:
            return list(session.execute(stmt).scalars())

    def within_radius(self, origin: Coordinates, radius_km: float) -> list[Station]:
        min_lat, max_lat, min_lon, max_lon = bounding_box(origin, radius_km)
        stmt = (
            select(Station)
            .where(station_table.c.latitude.between(min_lat, max_lat))
            .where(station_table.c.longitude.between(min_lon, max_lon))
        )
        with _session_scope(self.session_factory, "station") as session:
            candidates = list(session.execute(stmt).scalars())
        nearby = [(distance_km(origin, station.coordinates), station) for station in candidates]
        nearby.sort(key=lambda item: item[0])
        return [station for distance, station in nearby if distance <= radius_km]

    def add_stations(self, stations: Iterable[Station]) -> int:
        batch = list(stations)
        with _session_scope(self.session_factory, "station") as session:
            session.add_all(batch)
            session.commit()
        log.info("Stored %s stations", len(batch))
        return len(batch)


if TYPE_CHECKING:
    from fuelrecon.domain.ports import PriceStore, StationStore

    def _check_ports(session_factory: SessionFactory) -> None:
        _prices: PriceStore = SqlAlchemyPriceStore(session_factory)
        _stations: StationStore = SqlAlchemyStationStore(session_factory)
