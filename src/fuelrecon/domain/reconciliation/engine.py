"""Reconciliation entry point: fetch from the stores, match, deduplicate, aggregate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from fuelrecon.domain.errors import NotFoundError, UpstreamUnavailableError
from fuelrecon.domain.time_windows import utcnow

from .aggregate import Aggregator
from .deduplicate import deduplicate_records

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime
    from uuid import UUID

    from fuelrecon.domain.model import (
        CommunityReport,
        Coordinates,
        PriceRecord,
        ReportingCycle,
        Station,
    )
    from fuelrecon.domain.ports import PriceStore, ReportingUnitOfWork, StationStore
    from fuelrecon.domain.reporting import ReportLifecycleManager
    from fuelrecon.domain.time_windows import Clock

    from .contracts import AggregatedPrice, CanonicalPrice, PriceHistoryPoint

log = logging.getLogger(__name__)

DEFAULT_HISTORY_PERIODS: Final = 4


@dataclass(slots=True)
class ReconciliationEngine:
    """Operations offered to the presentation layer.

    Each data source is fetched independently; a source that is unavailable is
    logged and treated as empty so the other one still produces results.
    """

    prices: PriceStore
    stations: StationStore
    unit_of_work_factory: Callable[[], ReportingUnitOfWork]
    lifecycle: ReportLifecycleManager
    aggregator: Aggregator = field(default_factory=Aggregator)
    clock: Clock = utcnow

    # Reconciliation -------------------------------------------------------

    def reconcile(self, station: Station) -> list[AggregatedPrice]:
        now = self.clock()
        records = self._official_records()
        reports = self._active_reports([station], now)
        return self.aggregator.best_prices_for_station(station, records, reports, now)

    def reconcile_area(
        self,
        stations: Iterable[Station],
        *,
        area_hint: str | None = None,
        origin: Coordinates | None = None,
    ) -> dict[str, list[AggregatedPrice]]:
        station_list = list(stations)
        now = self.clock()
        records = self._official_records()
        reports = self._active_reports(station_list, now)
        return self.aggregator.best_prices_for_area(
            station_list, records, reports, now, area_hint=area_hint, origin=origin
        )

    def reconcile_station_id(self, station_id: UUID) -> list[AggregatedPrice]:
        station = self.stations.get(station_id)
        if station is None:
            raise NotFoundError("Station", station_id)
        return self.reconcile(station)

    def reconcile_city(self, city: str) -> dict[str, list[AggregatedPrice]]:
        return self.reconcile_area(self.stations.by_city(city), area_hint=city)

    def reconcile_nearby(
        self, origin: Coordinates, radius_km: float
    ) -> dict[str, list[AggregatedPrice]]:
        return self.reconcile_area(self.stations.within_radius(origin, radius_km), origin=origin)

    def official_prices(self, area: str, brand: str) -> list[CanonicalPrice]:
        """Published prices for one area and brand, one per fuel type."""

        try:
            records = self.prices.records_for(area, brand)
        except UpstreamUnavailableError as exc:
            log.warning("Official prices unavailable for %s/%s: %s", area, brand, exc)
            return []
        newest = max((record.period_start for record in records), default=None)
        return deduplicate_records(record for record in records if record.period_start == newest)

    def price_history(
        self, area: str, fuel_type: str, *, periods: int = DEFAULT_HISTORY_PERIODS
    ) -> list[PriceHistoryPoint]:
        try:
            records = self.prices.recent_periods(periods)
        except UpstreamUnavailableError as exc:
            log.warning("Price history unavailable: %s", exc)
            return []
        return self.aggregator.price_history(records, area, fuel_type)

    # Report lifecycle -----------------------------------------------------

    def submit_report(
        self, station_id: UUID, fuel_type: str, price: float, user_id: str
    ) -> CommunityReport:
        return self.lifecycle.submit_report(station_id, fuel_type, price, user_id)

    def vote(
        self, report_id: UUID, user_id: str, is_upvote: bool  # noqa: FBT001
    ) -> CommunityReport:
        return self.lifecycle.vote(report_id, user_id, is_upvote=is_upvote)

    def start_new_cycle(self) -> ReportingCycle:
        return self.lifecycle.start_new_cycle()

    def active_cycle(self) -> ReportingCycle | None:
        return self.lifecycle.active_cycle()

    # Sources --------------------------------------------------------------

    def _official_records(self) -> Sequence[PriceRecord]:
        try:
            return self.prices.latest_records()
        except UpstreamUnavailableError as exc:
            log.warning("Official prices unavailable, continuing without them: %s", exc)
            return []

    def _active_reports(self, stations: Sequence[Station], now: datetime) -> list[CommunityReport]:
        if not stations:
            return []
        try:
            with self.unit_of_work_factory() as uow:
                return list(
                    uow.repositories.reports.active_for_stations(
                        [station.id for station in stations], now
                    )
                )
        except UpstreamUnavailableError as exc:
            log.warning("Community reports unavailable, continuing without them: %s", exc)
            return []


__all__ = ["DEFAULT_HISTORY_PERIODS", "ReconciliationEngine"]
