"""Pair official price records with stations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fuelrecon.domain.model import MatchScope

from .confidence import STRONG_MATCH_THRESHOLD, ConfidenceScorer, is_valid_match
from .contracts import MatchResult

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from fuelrecon.domain.model import PriceRecord, Station

    from .normalize import Normalizer

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Matcher:
    scorer: ConfidenceScorer = field(default_factory=ConfidenceScorer)

    @property
    def normalizer(self) -> Normalizer:
        return self.scorer.normalizer

    def city_scope(self, price: PriceRecord, stations: Iterable[Station]) -> list[Station]:
        """Stations located in the record's area, in input order."""

        return [
            station for station in stations if self.normalizer.same_city(price.area, station.city)
        ]

    def find_best_station_for_price(
        self, price: PriceRecord, stations: Sequence[Station]
    ) -> MatchResult | None:
        """Best station for ``price``, preferring stations inside the record's area.

        The search widens to every station only when no in-area candidate reaches
        the strong-match threshold; a wider candidate must then strictly beat the
        in-area best. Equal scores keep the earlier candidate.
        """

        in_scope = self.city_scope(price, stations)
        best: Station | None = None
        best_score = 0.0
        scope = MatchScope.CITY
        for station in in_scope:
            score = self.scorer.price_station_match(price, station)
            if best is None or score > best_score:
                best, best_score = station, score

        if best is None or best_score < STRONG_MATCH_THRESHOLD:
            in_scope_ids = {station.id for station in in_scope}
            for station in stations:
                if station.id in in_scope_ids:
                    continue
                score = self.scorer.price_station_match(price, station)
                if score > best_score:
                    best, best_score, scope = station, score, MatchScope.FUZZY

        if best is None:
            return None
        confidence = self.scorer.penalized_match(price, best)
        if not is_valid_match(confidence):
            log.debug(
                "No station for %s %s in %s (best %.2f)",
                price.brand,
                price.fuel_type,
                price.area,
                confidence,
            )
            return None
        return MatchResult(record=price, station=best, confidence=confidence, scope=scope)

    def find_stations_for_price(
        self, price: PriceRecord, stations: Iterable[Station]
    ) -> list[MatchResult]:
        """Every station above the match threshold; in-area matches rank before fuzzy ones."""

        matches: list[MatchResult] = []
        for station in stations:
            confidence = self.scorer.penalized_match(price, station)
            if not is_valid_match(confidence):
                continue
            scope = (
                MatchScope.CITY
                if self.normalizer.same_city(price.area, station.city)
                else MatchScope.FUZZY
            )
            matches.append(
                MatchResult(record=price, station=station, confidence=confidence, scope=scope)
            )
        return sorted(
            matches,
            key=lambda match: (match.scope is not MatchScope.CITY, -match.confidence),
        )

    def find_prices_for_station(
        self, station: Station, prices: Iterable[PriceRecord]
    ) -> list[MatchResult]:
        """Every official record that applies to ``station``, most confident first."""

        matches: list[MatchResult] = []
        for price in prices:
            confidence = self.scorer.penalized_match(price, station)
            if not is_valid_match(confidence):
                continue
            scope = (
                MatchScope.CITY
                if self.normalizer.same_city(price.area, station.city)
                else MatchScope.FUZZY
            )
            matches.append(
                MatchResult(record=price, station=station, confidence=confidence, scope=scope)
            )
        return sorted(matches, key=lambda match: -match.confidence)


__all__ = ["Matcher"]
