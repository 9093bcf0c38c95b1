"""Public interface for the PostgREST price feed adapter."""

from __future__ import annotations

from .client import PostgrestFeed, PostgrestPriceStore, PostgrestStationStore
from .schema import FuelPriceRow, GasStationRow, OperatingHoursPayload
from .translator import parse_price_records, parse_stations, price_record_from_row, station_from_row

__all__ = [
    "FuelPriceRow",
    "GasStationRow",
    "OperatingHoursPayload",
    "PostgrestFeed",
    "PostgrestPriceStore",
    "PostgrestStationStore",
    "parse_price_records",
    "parse_stations",
    "price_record_from_row",
    "station_from_row",
]
