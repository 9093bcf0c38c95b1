"""Value objects exchanged between reconciliation stages and returned to callers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fuelrecon.domain.model import (
    CommunityReport,
    MatchScope,
    PriceRecord,
    PriceSource,
    Station,
    is_valid_price,
)

from .confidence import confidence_level, is_price_reliable

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

    from fuelrecon.domain.model import ConfidenceLevel

type PricedRecord = PriceRecord | CommunityReport


@dataclass(slots=True, frozen=True, kw_only=True)
class MatchResult:
    """A record tied to a station (or to none) with the confidence of that tie."""

    record: PricedRecord
    station: Station | None
    confidence: float
    scope: MatchScope

    @property
    def price(self) -> float | None:
        return self.record.price_value

    @property
    def has_valid_price(self) -> bool:
        return is_valid_price(self.price)

    @property
    def level(self) -> ConfidenceLevel:
        return confidence_level(self.confidence)


@dataclass(slots=True, frozen=True, kw_only=True)
class CanonicalPrice:
    """The single surviving match for one canonical fuel type."""

    fuel_type: str
    match: MatchResult

    @property
    def literal_fuel_type(self) -> str:
        return self.match.record.fuel_type


@dataclass(slots=True, frozen=True, kw_only=True)
class OfficialPriceData:
    record_id: UUID
    area: str
    brand: str
    min_price: float
    max_price: float
    common_price: float
    period_start: date

    @classmethod
    def from_record(cls, record: PriceRecord) -> OfficialPriceData:
        return cls(
            record_id=record.id,
            area=record.area,
            brand=record.brand,
            min_price=record.min_price,
            max_price=record.max_price,
            common_price=record.common_price,
            period_start=record.period_start,
        )

    @property
    def has_valid_price(self) -> bool:
        return is_valid_price(self.common_price)


@dataclass(slots=True, frozen=True, kw_only=True)
class Verification:
    """Vote metadata for the displayed community report."""

    report_id: UUID
    confirmed_count: int
    disputed_count: int
    recency_label: str
    confidence: float
    expires_at: datetime

    @property
    def is_reliable(self) -> bool:
        return is_price_reliable(self.confidence, self.confirmed_count - self.disputed_count)


@dataclass(slots=True, frozen=True, kw_only=True)
class AggregatedPrice:
    fuel_type: str
    station: Station | None
    official: OfficialPriceData | None
    community_price: float | None
    verification: Verification | None
    match_confidence: float
    distance_km: float | None = None

    @property
    def display_price(self) -> float | None:
        """Community price when one is active, else the official common price if usable."""

        if self.community_price is not None:
            return self.community_price
        if self.official is not None and self.official.has_valid_price:
            return self.official.common_price
        return None

    @property
    def source(self) -> PriceSource | None:
        if self.community_price is not None:
            return PriceSource.COMMUNITY
        if self.official is not None and self.official.has_valid_price:
            return PriceSource.OFFICIAL
        return None

    @property
    def has_valid_price(self) -> bool:
        return is_valid_price(self.display_price)

    @property
    def level(self) -> ConfidenceLevel:
        return confidence_level(self.match_confidence)


@dataclass(slots=True, frozen=True, kw_only=True)
class PriceHistoryPoint:
    period_start: date
    record: PriceRecord

    @property
    def common_price(self) -> float:
        return self.record.common_price


__all__ = [
    "AggregatedPrice",
    "CanonicalPrice",
    "MatchResult",
    "OfficialPriceData",
    "PriceHistoryPoint",
    "PricedRecord",
    "Verification",
]
