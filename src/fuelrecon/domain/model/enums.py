"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class StationStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TEMPORARILY_CLOSED = "temporarily_closed"
    PERMANENTLY_CLOSED = "permanently_closed"


class ReportState(StrEnum):
    """A submitted report is active until its window elapses or a cycle reset expires it."""

    ACTIVE = "active"
    EXPIRED = "expired"


class PriceSource(StrEnum):
    OFFICIAL = "official"
    COMMUNITY = "community"


class MatchScope(StrEnum):
    """How a record was tied to a station."""

    CITY = "city"  # station city lies inside the record's area
    FUZZY = "fuzzy"  # found by widening the search beyond the area
    UNMATCHED = "unmatched"


class ConfidenceLevel(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
