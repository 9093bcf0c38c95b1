from __future__ import annotations

import math
from datetime import timedelta
from uuid import uuid4

import pytest

from fuelrecon.domain.model import ConfidenceLevel
from fuelrecon.domain.reconciliation import (
    ConfidenceScorer,
    adjust_for_invalid_price,
    confidence_level,
    is_price_reliable,
    is_valid_match,
)
from tests.helpers.fuel import NOW, QUEZON_CITY, make_record, make_report, make_station


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (1.0, ConfidenceLevel.HIGH),
        (0.8, ConfidenceLevel.HIGH),
        (0.79, ConfidenceLevel.MEDIUM),
        (0.5, ConfidenceLevel.MEDIUM),
        (0.49, ConfidenceLevel.LOW),
    ],
)
def test_confidence_level_boundaries(score: float, expected: ConfidenceLevel) -> None:
    assert confidence_level(score) is expected


def test_is_valid_match_threshold() -> None:
    assert is_valid_match(0.5)
    assert not is_valid_match(0.4999)


@pytest.mark.parametrize("price", [0.0, None, -3.0, math.nan, math.inf])
def test_invalid_prices_are_penalized_not_excluded(price: float | None) -> None:
    assert adjust_for_invalid_price(0.8, price) == pytest.approx(0.72)


def test_valid_prices_keep_their_confidence() -> None:
    assert adjust_for_invalid_price(0.8, 58.0) == 0.8


def test_is_price_reliable() -> None:
    assert is_price_reliable(0.85, -3)
    assert is_price_reliable(0.6, 1)
    assert not is_price_reliable(0.6, 0)
    assert not is_price_reliable(0.4, 5)


def test_price_station_match_weights_brand_over_area() -> None:
    scorer = ConfidenceScorer()
    record = make_record(area="Makati City", brand="Petron Corp")

    same_brand_same_city = scorer.price_station_match(record, make_station())
    other_brand_same_city = scorer.price_station_match(
        record, make_station("Shell Ayala", brand="Shell")
    )
    same_brand_other_city = scorer.price_station_match(
        record, make_station("Petron EDSA", city="Quezon City", coordinates=QUEZON_CITY)
    )

    assert same_brand_same_city == pytest.approx(1.0)
    assert other_brand_same_city == pytest.approx(0.3)
    assert same_brand_other_city == pytest.approx(0.73)


def test_penalized_match_discounts_zero_filled_records() -> None:
    scorer = ConfidenceScorer()

    assert scorer.penalized_match(make_record(common_price=0.0), make_station()) == pytest.approx(
        0.9
    )


def test_report_confidence_blends_votes_and_recency() -> None:
    scorer = ConfidenceScorer()
    station_id = uuid4()

    fresh = make_report(station_id, reported_at=NOW)
    aged = make_report(station_id, reported_at=NOW - timedelta(hours=6), upvotes=3, downvotes=1)
    stale = make_report(station_id, reported_at=NOW - timedelta(hours=30))

    assert scorer.report_confidence(fresh, NOW) == pytest.approx(1.0)
    assert scorer.report_confidence(aged, NOW) == pytest.approx(0.75)
    assert scorer.report_confidence(stale, NOW) == pytest.approx(0.7)


def test_report_confidence_respects_validity_window() -> None:
    scorer = ConfidenceScorer(validity_window=timedelta(hours=12))
    report = make_report(uuid4(), reported_at=NOW - timedelta(hours=6))

    assert scorer.report_confidence(report, NOW) == pytest.approx(0.7 + 0.3 * 0.5)


@pytest.mark.parametrize(
    ("upvotes", "downvotes", "age", "expected", "level"),
    [
        (8, 2, timedelta(hours=2), 0.7 * 0.8 + 0.3 * (22 / 24), ConfidenceLevel.HIGH),
        (1, 0, timedelta(hours=12), 0.7 + 0.3 * 0.5, ConfidenceLevel.HIGH),
        (1, 3, timedelta(hours=23), 0.7 * 0.25 + 0.3 * (1 / 24), ConfidenceLevel.LOW),
    ],
)
def test_report_confidence_examples(
    upvotes: int, downvotes: int, age: timedelta, expected: float, level: ConfidenceLevel
) -> None:
    scorer = ConfidenceScorer()
    report = make_report(
        uuid4(), reported_at=NOW - age, upvotes=upvotes, downvotes=downvotes
    )

    score = scorer.report_confidence(report, NOW)

    assert score == pytest.approx(expected)
    assert confidence_level(score) is level


def test_well_voted_recent_report_is_high_confidence() -> None:
    report = make_report(
        uuid4(), reported_at=NOW - timedelta(hours=2), upvotes=8, downvotes=2
    )

    score = ConfidenceScorer().report_confidence(report, NOW)

    assert score == pytest.approx(0.835, abs=1e-3)
    assert confidence_level(score) is ConfidenceLevel.HIGH
