from __future__ import annotations

import pytest

from fuelrecon.domain.model import MatchScope
from fuelrecon.domain.reconciliation import (
    MatchResult,
    deduplicate,
    deduplicate_records,
    should_replace,
)
from tests.helpers.fuel import make_record, make_station


def _match(fuel_type: str = "Diesel", price: float = 58.5, confidence: float = 0.9) -> MatchResult:
    return MatchResult(
        record=make_record(fuel_type, price),
        station=make_station(),
        confidence=confidence,
        scope=MatchScope.CITY,
    )


@pytest.mark.parametrize(
    ("existing", "incoming", "expected"),
    [
        pytest.param(_match(price=0.0), _match(confidence=0.5), True, id="valid-beats-missing"),
        pytest.param(_match(price=0.0), _match(price=0.0), False, id="both-missing"),
        pytest.param(_match(), _match(price=0.0, confidence=1.0), False, id="missing-never-wins"),
        pytest.param(_match(confidence=0.9), _match(confidence=0.85), False, id="less-confident"),
        pytest.param(_match(confidence=0.5), _match(confidence=0.8), False, id="not-high"),
        pytest.param(_match(confidence=0.9), _match(confidence=0.9), True, id="equal-and-high"),
        pytest.param(_match(confidence=0.6), _match(confidence=0.95), True, id="more-confident"),
    ],
)
def test_should_replace(existing: MatchResult, incoming: MatchResult, expected: bool) -> None:
    assert should_replace(existing, incoming) is expected


def test_deduplicate_collapses_spelling_variants() -> None:
    first = _match("Diesel", 58.5, confidence=0.7)
    variant = _match("DIESEL ", 59.0, confidence=0.75)

    result = deduplicate([first, variant])

    assert len(result) == 1
    assert result[0].fuel_type == "Diesel"
    assert result[0].match is first


def test_deduplicate_replaces_zero_price_holder() -> None:
    missing = _match("Unleaded RON-95", 0.0)
    priced = _match("Gasoline RON95", 62.1, confidence=0.6)

    result = deduplicate([missing, priced])

    assert [price.fuel_type for price in result] == ["Gasoline (RON 95)"]
    assert result[0].match is priced
    assert result[0].literal_fuel_type == "Gasoline RON95"


def test_deduplicate_groups_by_leading_word() -> None:
    matches = [
        _match("Kerosene"),
        _match("Premium Diesel"),
        _match("Gasoline (RON 95)"),
        _match("LPG"),
        _match("Diesel"),
    ]

    result = deduplicate(matches)

    assert [price.fuel_type for price in result] == [
        "Auto LPG",
        "Diesel",
        "Diesel Plus",
        "Gasoline (RON 95)",
        "Kerosene",
    ]


def test_deduplicate_skips_blank_fuel_types() -> None:
    assert deduplicate([_match("  "), _match("")]) == []


def test_deduplicate_records_builds_unmatched_results() -> None:
    records = [make_record("Diesel", 58.5), make_record("diesel", 57.0)]

    result = deduplicate_records(records, confidence=0.4)

    assert len(result) == 1
    match = result[0].match
    assert match.record is records[0]
    assert match.station is None
    assert match.scope is MatchScope.UNMATCHED
    assert match.confidence == pytest.approx(0.4)
