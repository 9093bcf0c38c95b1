"""Confidence scores for price/station matches and community reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Final

from fuelrecon.domain.model import ConfidenceLevel, is_valid_price
from fuelrecon.domain.time_windows import DEFAULT_VALIDITY_WINDOW, recency_factor

from .normalize import Normalizer

if TYPE_CHECKING:
    from datetime import datetime

    from fuelrecon.domain.model import CommunityReport, PriceRecord, Station

BRAND_WEIGHT: Final = 0.7
AREA_WEIGHT: Final = 0.3
VOTE_WEIGHT: Final = 0.7
RECENCY_WEIGHT: Final = 0.3

MATCH_THRESHOLD: Final = 0.5
STRONG_MATCH_THRESHOLD: Final = 0.7
HIGH_CONFIDENCE: Final = 0.8
INVALID_PRICE_PENALTY: Final = 0.9
UNMATCHED_CONFIDENCE: Final = 0.3


def confidence_level(score: float) -> ConfidenceLevel:
    if score >= HIGH_CONFIDENCE:
        return ConfidenceLevel.HIGH
    if score >= MATCH_THRESHOLD:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def is_valid_match(confidence: float) -> bool:
    return confidence >= MATCH_THRESHOLD


def adjust_for_invalid_price(confidence: float, price: float | None) -> float:
    """Penalize, never exclude, records without a usable price."""

    if is_valid_price(price):
        return confidence
    return confidence * INVALID_PRICE_PENALTY


def is_price_reliable(confidence: float, vote_differential: int) -> bool:
    """Trust a report outright when confident, or moderately so with net positive votes."""

    return confidence >= HIGH_CONFIDENCE or (
        confidence >= MATCH_THRESHOLD and vote_differential > 0
    )


@dataclass(slots=True, frozen=True)
class ConfidenceScorer:
    normalizer: Normalizer = field(default_factory=Normalizer)
    validity_window: timedelta = DEFAULT_VALIDITY_WINDOW

    def price_station_match(self, price: PriceRecord, station: Station) -> float:
        """Weighted blend of brand similarity and area/city agreement (not symmetric)."""

        brand = self.normalizer.brand_similarity(price.brand, station.brand)
        area = self.normalizer.area_city_match_confidence(price.area, station.city)
        return BRAND_WEIGHT * brand + AREA_WEIGHT * area

    def penalized_match(self, price: PriceRecord, station: Station) -> float:
        confidence = self.price_station_match(price, station)
        return adjust_for_invalid_price(confidence, price.common_price)

    def report_confidence(self, report: CommunityReport, now: datetime) -> float:
        recency = recency_factor(report.reported_at, now, window=self.validity_window)
        return VOTE_WEIGHT * report.vote_ratio + RECENCY_WEIGHT * recency


__all__ = [
    "HIGH_CONFIDENCE",
    "INVALID_PRICE_PENALTY",
    "MATCH_THRESHOLD",
    "STRONG_MATCH_THRESHOLD",
    "UNMATCHED_CONFIDENCE",
    "ConfidenceScorer",
    "adjust_for_invalid_price",
    "confidence_level",
    "is_price_reliable",
    "is_valid_match",
]
