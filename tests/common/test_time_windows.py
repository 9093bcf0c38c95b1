from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from fuelrecon.domain.time_windows import (
    age_in_hours,
    ensure_aware,
    recency_factor,
    recency_label,
)

NOW = datetime(2026, 10, 14, 12, tzinfo=UTC)


@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [
        (timedelta(seconds=30), "just now"),
        (timedelta(minutes=1), "1 minute ago"),
        (timedelta(minutes=59), "59 minutes ago"),
        (timedelta(hours=1), "1 hour ago"),
        (timedelta(hours=23, minutes=59), "23 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=3, hours=5), "3 days ago"),
        (timedelta(minutes=-5), "just now"),
    ],
)
def test_recency_label(elapsed: timedelta, expected: str) -> None:
    assert recency_label(NOW - elapsed, NOW) == expected


def test_recency_factor_decays_linearly_over_window() -> None:
    assert recency_factor(NOW, NOW) == pytest.approx(1.0)
    assert recency_factor(NOW - timedelta(hours=6), NOW) == pytest.approx(0.75)
    assert recency_factor(NOW - timedelta(hours=30), NOW) == pytest.approx(0.0)
    assert recency_factor(NOW + timedelta(hours=1), NOW) == pytest.approx(1.0)


def test_recency_factor_respects_custom_window() -> None:
    window = timedelta(hours=12)

    assert recency_factor(NOW - timedelta(hours=6), NOW, window=window) == pytest.approx(0.5)
    assert recency_factor(NOW, NOW, window=timedelta(0)) == 0.0


def test_age_in_hours() -> None:
    assert age_in_hours(NOW - timedelta(minutes=90), NOW) == pytest.approx(1.5)


def test_ensure_aware_normalizes_to_utc() -> None:
    manila = timezone(timedelta(hours=8))

    converted = ensure_aware(datetime(2026, 10, 14, 20, tzinfo=manila))

    assert converted == NOW
    assert converted.tzinfo is UTC


def test_ensure_aware_rejects_naive_timestamps() -> None:
    with pytest.raises(ValueError, match="timezone"):
        ensure_aware(datetime(2026, 10, 14, 12))  # noqa: DTZ001
