"""Read-only price and station stores backed by a PostgREST endpoint."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final, cast

import httpx
from pydantic import ValidationError

from fuelrecon.adapters.http_resilience import ResilientClient
from fuelrecon.config import PriceFeedConfig
from fuelrecon.domain.errors import UpstreamUnavailableError
from fuelrecon.domain.geo import bounding_box, distance_km

from .schema import WeekRow
from .translator import parse_price_records, parse_stations

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from uuid import UUID

    from fuelrecon.config import ResilienceConfig
    from fuelrecon.domain.model import Coordinates, PriceRecord, Station

log = getLogger(__name__)

PRICES_TABLE: Final = "fuel_prices"
STATIONS_TABLE: Final = "gas_stations"
_REST_PATH: Final = "rest/v1"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class PostgrestFeed:
    """Thin synchronous wrapper issuing filtered ``GET`` requests against tables."""

    config: PriceFeedConfig = field(default_factory=PriceFeedConfig.from_environment)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def select(self, table: str, params: Mapping[str, str]) -> list[object]:
        return asyncio.run(self._select_async(table, params))

    async def _select_async(self, table: str, params: Mapping[str, str]) -> list[object]:
        url = f"{self.config.base_url}/{_REST_PATH}/{table}"
        headers = {
            "apikey": self.config.api_key,
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
        }
        client = self.client_factory(self.config.resilience)
        try:
            response = await client.get(url, params=dict(params), headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(table, str(exc)) from exc
        except ValueError as exc:
            raise UpstreamUnavailableError(table, f"invalid JSON: {exc}") from exc
        finally:
            await client.aclose()

        if not isinstance(payload, list):
            raise UpstreamUnavailableError(table, "expected a list of rows")
        rows = cast(list[object], payload)
        log.debug("Fetched %s rows from %s", len(rows), table)
        return rows


@dataclass(slots=True)
class PostgrestPriceStore:
    feed: PostgrestFeed = field(default_factory=PostgrestFeed)

    def latest_records(self) -> Sequence[PriceRecord]:
        weeks = self._recent_weeks(1)
        if not weeks:
            return []
        return self._records_in_weeks(weeks)

    def records_for(self, area: str, brand: str) -> Sequence[PriceRecord]:
        rows = self.feed.select(
            PRICES_TABLE,
            {
                "select": "*",
                "area": f"eq.{area}",
                "brand": f"eq.{brand}",
                "order": "week_of.desc",
            },
        )
        return parse_price_records(rows)

    def recent_periods(self, periods: int) -> Sequence[PriceRecord]:
        weeks = self._recent_weeks(periods)
        if not weeks:
            return []
        return self._records_in_weeks(weeks)

    def _recent_weeks(self, count: int) -> list[str]:
        # PostgREST has no DISTINCT; over-fetch and collapse client-side
        rows = self.feed.select(
            PRICES_TABLE,
            {"select": "week_of", "order": "week_of.desc", "limit": str(max(count, 1) * 200)},
        )
        weeks: list[str] = []
        for item in rows:
            try:
                week = WeekRow.model_validate(item).week_of.isoformat()
            except ValidationError:
                continue
            if week not in weeks:
                weeks.append(week)
            if len(weeks) >= count:
                break
        return weeks

    def _records_in_weeks(self, weeks: Sequence[str]) -> list[PriceRecord]:
        rows = self.feed.select(
            PRICES_TABLE, {"select": "*", "week_of": f"in.({','.join(weeks)})"}
        )
        return parse_price_records(rows)


@dataclass(slots=True)
class PostgrestStationStore:
    feed: PostgrestFeed = field(default_factory=PostgrestFeed)

    def get(self, station_id: UUID) -> Station | None:
        rows = self.feed.select(STATIONS_TABLE, {"select": "*", "id": f"eq.{station_id}"})
        stations = parse_stations(rows)
        return stations[0] if stations else None

    def by_city(self, city: str) -> Sequence[Station]:
        rows = self.feed.select(
            STATIONS_TABLE, {"select": "*", "city": f"ilike.{city}", "order": "name.asc"}
        )
        return parse_stations(rows)

    def within_radius(self, origin: Coordinates, radius_km: float) -> Sequence[Station]:
        min_lat, max_lat, min_lon, max_lon = bounding_box(origin, radius_km)
        rows = self.feed.select(
            STATIONS_TABLE,
            {
                "select": "*",
                "and": (
                    f"(latitude.gte.{min_lat},latitude.lte.{max_lat},"
                    f"longitude.gte.{min_lon},longitude.lte.{max_lon})"
                ),
            },
        )
        nearby = [
            (distance_km(origin, station.coordinates), station) for station in parse_stations(rows)
        ]
        nearby.sort(key=lambda item: item[0])
        return [station for distance, station in nearby if distance <= radius_km]


if TYPE_CHECKING:
    from fuelrecon.domain.ports import PriceStore, StationStore

    _price_store_check: PriceStore = PostgrestPriceStore()
    _station_store_check: StationStore = PostgrestStationStore()
