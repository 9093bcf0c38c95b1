"""Blend official and community prices into ranked per-fuel-type views."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from fuelrecon.domain.geo import distance_km
from fuelrecon.domain.model import MatchScope, PriceRecord
from fuelrecon.domain.time_windows import recency_label

from .confidence import (
    UNMATCHED_CONFIDENCE,
    ConfidenceScorer,
    adjust_for_invalid_price,
    is_valid_match,
)
from .contracts import (
    AggregatedPrice,
    MatchResult,
    OfficialPriceData,
    PriceHistoryPoint,
    Verification,
)
from .deduplicate import deduplicate, should_replace
from .match import Matcher
from .normalize import fuel_type_group, normalize_fuel_type

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date, datetime
    from uuid import UUID

    from fuelrecon.domain.model import CommunityReport, Coordinates, Station

    from .normalize import Normalizer

log = logging.getLogger(__name__)

DEFAULT_TOP_N: Final = 5
MIN_VALID_ENTRIES: Final = 3
# a report names its station explicitly
DIRECT_MATCH_CONFIDENCE: Final = 1.0


def latest_reports_by_fuel_type(
    reports: Iterable[CommunityReport], now: datetime
) -> dict[str, CommunityReport]:
    """Most recently submitted active report per canonical fuel type.

    Votes do not pick the winner; they only travel along as verification metadata.
    """

    latest: dict[str, CommunityReport] = {}
    for report in reports:
        if not report.is_active(now):
            continue
        fuel_type = normalize_fuel_type(report.fuel_type)
        if not fuel_type:
            continue
        current = latest.get(fuel_type)
        if current is None or report.reported_at > current.reported_at:
            latest[fuel_type] = report
    return latest


def _fuel_type_order(fuel_type: str) -> tuple[str, str]:
    return (fuel_type_group(fuel_type), fuel_type.casefold())


@dataclass(slots=True)
class _Slot:
    """Official and community inputs gathered for one station (or stationless record)."""

    station: Station | None
    official: MatchResult | None = None
    report: CommunityReport | None = None


@dataclass(slots=True, frozen=True)
class Aggregator:
    matcher: Matcher = field(default_factory=Matcher)
    top_n: int = DEFAULT_TOP_N
    min_valid_entries: int = MIN_VALID_ENTRIES

    @property
    def scorer(self) -> ConfidenceScorer:
        return self.matcher.scorer

    @property
    def normalizer(self) -> Normalizer:
        return self.matcher.normalizer

    def best_prices_for_station(
        self,
        station: Station,
        records: Iterable[PriceRecord],
        reports: Iterable[CommunityReport],
        now: datetime,
    ) -> list[AggregatedPrice]:
        canonical = deduplicate(self.matcher.find_prices_for_station(station, records))
        official = {price.fuel_type: price for price in canonical}
        community = latest_reports_by_fuel_type(
            (report for report in reports if report.station_id == station.id), now
        )

        entries: list[tuple[tuple[str, str], AggregatedPrice]] = []
        for fuel_type in official.keys() | community.keys():
            canonical_price = official.get(fuel_type)
            report = community.get(fuel_type)
            literal = (
                canonical_price.literal_fuel_type
                if canonical_price is not None
                else report.fuel_type
                if report is not None
                else fuel_type
            )
            slot = _Slot(
                station=station,
                official=canonical_price.match if canonical_price is not None else None,
                report=report,
            )
            order = (fuel_type_group(fuel_type), literal.casefold())
            entries.append((order, self._entry(fuel_type, slot, now)))
        entries.sort(key=lambda item: item[0])
        return [entry for _, entry in entries]

    def best_prices_for_area(
        self,
        stations: Iterable[Station],
        records: Iterable[PriceRecord],
        reports: Iterable[CommunityReport],
        now: datetime,
        *,
        area_hint: str | None = None,
        origin: Coordinates | None = None,
    ) -> dict[str, list[AggregatedPrice]]:
        """Top entries per canonical fuel type across ``stations``.

        Official records that match no station still appear, stationless and with
        low confidence, so a fuel type never vanishes for lack of a station match.
        """

        station_list = list(stations)
        station_ids = {station.id for station in station_list}
        slots: dict[str, dict[UUID, _Slot]] = defaultdict(dict)

        for record in records:
            if area_hint and not is_valid_match(
                self.normalizer.area_city_match_confidence(record.area, area_hint)
            ):
                continue
            fuel_type = normalize_fuel_type(record.fuel_type)
            if not fuel_type:
                continue
            match = self.matcher.find_best_station_for_price(record, station_list)
            if match is None:
                match = MatchResult(
                    record=record,
                    station=None,
                    confidence=adjust_for_invalid_price(UNMATCHED_CONFIDENCE, record.common_price),
                    scope=MatchScope.UNMATCHED,
                )
            key = match.station.id if match.station is not None else record.id
            slot = slots[fuel_type].setdefault(key, _Slot(station=match.station))
            if slot.official is None or should_replace(slot.official, match):
                slot.official = match

        by_station: dict[UUID, list[CommunityReport]] = defaultdict(list)
        for report in reports:
            if report.station_id in station_ids:
                by_station[report.station_id].append(report)
        stations_by_id = {station.id: station for station in station_list}
        for station_id, station_reports in by_station.items():
            for fuel_type, report in latest_reports_by_fuel_type(station_reports, now).items():
                slot = slots[fuel_type].setdefault(
                    station_id, _Slot(station=stations_by_id[station_id])
                )
                slot.report = report

        result: dict[str, list[AggregatedPrice]] = {}
        for fuel_type in sorted(slots, key=_fuel_type_order):
            entries = [
                self._entry(fuel_type, slot, now, origin=origin)
                for slot in slots[fuel_type].values()
            ]
            result[fuel_type] = self.rank(entries)
        return result

    def rank(self, entries: Sequence[AggregatedPrice]) -> list[AggregatedPrice]:
        """Usable prices first, cheapest first; then entries without a usable price.

        With too few usable prices the remaining slots go to the nearest stations
        without one, so the list stays full.
        """

        valid = sorted(
            (entry for entry in entries if entry.has_valid_price),
            key=lambda entry: entry.display_price or 0.0,
        )
        invalid = [entry for entry in entries if not entry.has_valid_price]
        if len(valid) < self.min_valid_entries:
            invalid.sort(
                key=lambda entry: (
                    entry.distance_km is None,
                    entry.distance_km or 0.0,
                    -entry.match_confidence,
                )
            )
        else:
            invalid.sort(key=lambda entry: -entry.match_confidence)
        return [*valid, *invalid][: self.top_n]

    def price_history(
        self, records: Iterable[PriceRecord], area: str, fuel_type: str
    ) -> list[PriceHistoryPoint]:
        """One record per period for ``area`` and ``fuel_type``, newest period first.

        Per period the pick is a usable price from the area itself, else any usable
        price from a related area, else whatever was published.
        """

        target = normalize_fuel_type(fuel_type)
        by_period: dict[date, list[tuple[float, PriceRecord]]] = defaultdict(list)
        for record in records:
            if normalize_fuel_type(record.fuel_type) != target:
                continue
            area_confidence = self.normalizer.area_city_match_confidence(record.area, area)
            if is_valid_match(area_confidence):
                by_period[record.period_start].append((area_confidence, record))

        points: list[PriceHistoryPoint] = []
        for period, candidates in by_period.items():
            chosen = next(
                (record for score, record in candidates if score == 1.0 and record.has_valid_price),
                None,
            )
            if chosen is None:
                chosen = next(
                    (record for _, record in candidates if record.has_valid_price),
                    candidates[0][1],
                )
            points.append(PriceHistoryPoint(period_start=period, record=chosen))
        points.sort(key=lambda point: point.period_start, reverse=True)
        return points

    def _entry(
        self,
        fuel_type: str,
        slot: _Slot,
        now: datetime,
        *,
        origin: Coordinates | None = None,
    ) -> AggregatedPrice:
        official = None
        match_confidence = DIRECT_MATCH_CONFIDENCE
        if slot.official is not None:
            match_confidence = slot.official.confidence
            if isinstance(slot.official.record, PriceRecord):
                official = OfficialPriceData.from_record(slot.official.record)

        verification = None
        community_price = None
        if slot.report is not None:
            report = slot.report
            community_price = report.price
            verification = Verification(
                report_id=report.id,
                confirmed_count=report.upvotes,
                disputed_count=report.downvotes,
                recency_label=recency_label(report.reported_at, now),
                confidence=self.scorer.report_confidence(report, now),
                expires_at=report.expires_at,
            )

        distance = None
        if origin is not None and slot.station is not None:
            distance = distance_km(origin, slot.station.coordinates)

        return AggregatedPrice(
            fuel_type=fuel_type,
            station=slot.station,
            official=official,
            community_price=community_price,
            verification=verification,
            match_confidence=match_confidence,
            distance_km=distance,
        )


__all__ = [
    "DEFAULT_TOP_N",
    "DIRECT_MATCH_CONFIDENCE",
    "MIN_VALID_ENTRIES",
    "Aggregator",
    "latest_reports_by_fuel_type",
]
