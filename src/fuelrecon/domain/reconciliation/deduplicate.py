"""Collapse matches that describe the same fuel type under different spellings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fuelrecon.domain.model import MatchScope

from .confidence import HIGH_CONFIDENCE
from .contracts import CanonicalPrice, MatchResult
from .normalize import fuel_type_group, normalize_fuel_type

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .contracts import PricedRecord

log = logging.getLogger(__name__)


def should_replace(existing: MatchResult, incoming: MatchResult) -> bool:
    """Decide whether ``incoming`` supersedes ``existing`` for the same fuel type.

    A usable price always beats a missing one. Between two usable prices the
    incoming one wins only when it is highly confident and at least as confident
    as the current holder; otherwise the first record seen is kept.
    """

    if not existing.has_valid_price:
        return incoming.has_valid_price
    if not incoming.has_valid_price:
        return False
    return incoming.confidence > HIGH_CONFIDENCE and existing.confidence <= incoming.confidence


def canonical_sort_key(price: CanonicalPrice) -> tuple[str, str]:
    return (fuel_type_group(price.fuel_type), price.literal_fuel_type.casefold())


def deduplicate(matches: Iterable[MatchResult]) -> list[CanonicalPrice]:
    """Keep one match per canonical fuel type, grouped alphabetically by leading word."""

    kept: dict[str, MatchResult] = {}
    seen = 0
    for match in matches:
        seen += 1
        fuel_type = normalize_fuel_type(match.record.fuel_type)
        if not fuel_type:
            continue
        current = kept.get(fuel_type)
        if current is None or should_replace(current, match):
            kept[fuel_type] = match

    result = sorted(
        (CanonicalPrice(fuel_type=fuel_type, match=match) for fuel_type, match in kept.items()),
        key=canonical_sort_key,
    )
    if seen != len(result):
        log.debug("Deduplicated %s records into %s fuel types", seen, len(result))
    return result


def deduplicate_records(
    records: Iterable[PricedRecord], *, confidence: float = 0.0
) -> list[CanonicalPrice]:
    """Deduplicate bare records that carry no station match."""

    return deduplicate(
        MatchResult(record=record, station=None, confidence=confidence, scope=MatchScope.UNMATCHED)
        for record in records
    )


__all__ = ["canonical_sort_key", "deduplicate", "deduplicate_records", "should_replace"]
