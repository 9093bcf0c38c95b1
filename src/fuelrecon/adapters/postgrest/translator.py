"""Translate feed rows into domain objects."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from fuelrecon.domain.model import (
    Coordinates,
    OperatingHours,
    PriceRecord,
    Station,
    StationStatus,
)

from .schema import FuelPriceRow, GasStationRow

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)

# legacy status spellings still present in imported station rows
_STATUS_ALIASES = {
    "operational": StationStatus.ACTIVE,
    "open": StationStatus.ACTIVE,
    "closed": StationStatus.INACTIVE,
}


def parse_status(raw: str | None) -> StationStatus:
    value = (raw or "").strip().lower().replace("-", "_").replace(" ", "_")
    if value in _STATUS_ALIASES:
        return _STATUS_ALIASES[value]
    try:
        return StationStatus(value)
    except ValueError:
        log.warning("Unknown station status %r, treating as inactive", raw)
        return StationStatus.INACTIVE


def price_record_from_row(row: FuelPriceRow) -> PriceRecord:
    return PriceRecord(
        id=row.id,
        area=row.area,
        brand=row.brand,
        fuel_type=row.fuel_type,
        min_price=row.min_price,
        max_price=row.max_price,
        common_price=row.common_price,
        period_start=row.week_of,
    )


def station_from_row(row: GasStationRow) -> Station:
    hours = None
    if row.operating_hours is not None:
        hours = OperatingHours(
            opens_at=row.operating_hours.open,
            closes_at=row.operating_hours.close,
            is_24_hours=row.operating_hours.is_24_hours,
            days_open=tuple(row.operating_hours.days_open),
        )
    return Station(
        id=row.id,
        name=row.name,
        brand=row.brand,
        city=row.city,
        address=row.address or "",
        coordinates=Coordinates(row.latitude, row.longitude),
        amenities=list(row.amenities),
        operating_hours=hours,
        status=parse_status(row.status),
    )


def parse_price_records(payload: Iterable[object]) -> list[PriceRecord]:
    """Validate rows one by one; malformed rows are skipped, not fatal."""

    records: list[PriceRecord] = []
    for item in payload:
        try:
            row = FuelPriceRow.model_validate(item)
        except ValidationError as exc:
            log.warning("Skipping malformed price row: %s", exc.errors(include_url=False))
            continue
        records.append(price_record_from_row(row))
    return records


def parse_stations(payload: Iterable[object]) -> list[Station]:
    stations: list[Station] = []
    for item in payload:
        try:
            row = GasStationRow.model_validate(item)
        except ValidationError as exc:
            log.warning("Skipping malformed station row: %s", exc.errors(include_url=False))
            continue
        stations.append(station_from_row(row))
    return stations
