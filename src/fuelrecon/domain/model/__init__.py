"""Public domain model surface."""

from __future__ import annotations

from fuelrecon.domain.model.entity import Entity, new_id
from fuelrecon.domain.model.enums import (
    ConfidenceLevel,
    MatchScope,
    PriceSource,
    ReportState,
    StationStatus,
)
from fuelrecon.domain.model.pricing import PriceRecord, count_valid_prices, is_valid_price
from fuelrecon.domain.model.reporting import (
    CommunityReport,
    ReportingCycle,
    ReportVote,
    vote_delta,
)
from fuelrecon.domain.model.station import Coordinates, OperatingHours, Station

__all__ = [
    "CommunityReport",
    "ConfidenceLevel",
    "Coordinates",
    "Entity",
    "MatchScope",
    "OperatingHours",
    "PriceRecord",
    "PriceSource",
    "ReportState",
    "ReportVote",
    "ReportingCycle",
    "Station",
    "StationStatus",
    "count_valid_prices",
    "is_valid_price",
    "new_id",
    "vote_delta",
]
