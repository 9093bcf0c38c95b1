"""Price reconciliation: normalize, score, match, deduplicate and aggregate."""

from __future__ import annotations

from .aggregate import Aggregator, latest_reports_by_fuel_type
from .confidence import (
    HIGH_CONFIDENCE,
    MATCH_THRESHOLD,
    ConfidenceScorer,
    adjust_for_invalid_price,
    confidence_level,
    is_price_reliable,
    is_valid_match,
)
from .contracts import (
    AggregatedPrice,
    CanonicalPrice,
    MatchResult,
    OfficialPriceData,
    PriceHistoryPoint,
    Verification,
)
from .deduplicate import deduplicate, deduplicate_records, should_replace
from .engine import ReconciliationEngine
from .match import Matcher
from .normalize import CANONICAL_FUEL_TYPES, Normalizer, normalize_fuel_type
from .vocabulary import DEFAULT_VOCABULARY, AliasTable, Region, Vocabulary

__all__ = [
    "CANONICAL_FUEL_TYPES",
    "DEFAULT_VOCABULARY",
    "HIGH_CONFIDENCE",
    "MATCH_THRESHOLD",
    "AggregatedPrice",
    "Aggregator",
    "AliasTable",
    "CanonicalPrice",
    "ConfidenceScorer",
    "MatchResult",
    "Matcher",
    "Normalizer",
    "OfficialPriceData",
    "PriceHistoryPoint",
    "ReconciliationEngine",
    "Region",
    "Verification",
    "Vocabulary",
    "adjust_for_invalid_price",
    "confidence_level",
    "deduplicate",
    "deduplicate_records",
    "is_price_reliable",
    "is_valid_match",
    "latest_reports_by_fuel_type",
    "normalize_fuel_type",
    "should_replace",
]
