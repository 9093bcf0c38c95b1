from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from fuelrecon.domain.errors import (
    CycleResetConflictError,
    InvalidInputError,
    NotFoundError,
)
from fuelrecon.domain.reporting import ReportLifecycleManager
from tests.helpers.fakes import FakeStationStore
from tests.helpers.fuel import NOW, make_station

if TYPE_CHECKING:
    from collections.abc import Callable

    from tests.helpers.fakes import FakeDatabase, FakeUnitOfWork
    from tests.helpers.fuel import MutableClock


def test_submit_report_stores_report_and_submitter_vote(
    lifecycle: ReportLifecycleManager, fake_database: FakeDatabase
) -> None:
    station_id = uuid4()

    report = lifecycle.submit_report(station_id, "  Diesel ", 57.9, "ana")

    stored = fake_database.state.reports[report.id]
    assert stored.fuel_type == "Diesel"
    assert stored.price == pytest.approx(57.9)
    assert (stored.upvotes, stored.downvotes) == (1, 0)
    assert stored.reported_at == NOW
    assert stored.expires_at == NOW + timedelta(hours=24)
    vote = fake_database.state.votes[(report.id, "ana")]
    assert vote.is_upvote
    assert fake_database.commits == 1


@pytest.mark.parametrize(
    ("fuel_type", "price", "user_id"),
    [
        pytest.param("Diesel", 0, "ana", id="zero-price"),
        pytest.param("Diesel", -4.5, "ana", id="negative-price"),
        pytest.param("Diesel", float("nan"), "ana", id="nan-price"),
        pytest.param("Diesel", True, "ana", id="bool-price"),
        pytest.param("Diesel", "57.9", "ana", id="text-price"),
        pytest.param("   ", 57.9, "ana", id="blank-fuel-type"),
        pytest.param("Diesel", 57.9, "", id="blank-user"),
    ],
)
def test_submit_report_rejects_invalid_input(
    lifecycle: ReportLifecycleManager,
    fake_database: FakeDatabase,
    fuel_type: str,
    price: float,
    user_id: str,
) -> None:
    with pytest.raises(InvalidInputError):
        lifecycle.submit_report(uuid4(), fuel_type, price, user_id)

    assert fake_database.state.reports == {}
    assert fake_database.commits == 0


def test_submit_report_checks_station_when_store_given(
    fake_unit_of_work: Callable[[], FakeUnitOfWork], clock: MutableClock
) -> None:
    station = make_station()
    manager = ReportLifecycleManager(
        unit_of_work_factory=fake_unit_of_work,
        stations=FakeStationStore([station]),
        clock=clock,
    )

    manager.submit_report(station.id, "Diesel", 57.9, "ana")
    with pytest.raises(NotFoundError):
        manager.submit_report(uuid4(), "Diesel", 57.9, "ana")


def test_vote_counts_each_user_once(
    lifecycle: ReportLifecycleManager, fake_database: FakeDatabase
) -> None:
    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")

    lifecycle.vote(report.id, "ben", is_upvote=True)
    lifecycle.vote(report.id, "ben", is_upvote=True)
    updated = lifecycle.vote(report.id, "cy", is_upvote=False)

    assert (updated.upvotes, updated.downvotes) == (2, 1)
    stored = fake_database.state.reports[report.id]
    assert (stored.upvotes, stored.downvotes) == (2, 1)
    assert len(fake_database.state.votes) == 3


def test_vote_switch_moves_one_vote(
    lifecycle: ReportLifecycleManager, fake_database: FakeDatabase
) -> None:
    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")

    lifecycle.vote(report.id, "ben", is_upvote=True)
    switched = lifecycle.vote(report.id, "ben", is_upvote=False)

    assert (switched.upvotes, switched.downvotes) == (1, 1)
    assert not fake_database.state.votes[(report.id, "ben")].is_upvote


def test_submitter_can_dispute_own_report(lifecycle: ReportLifecycleManager) -> None:
    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")

    updated = lifecycle.vote(report.id, "ana", is_upvote=False)

    assert (updated.upvotes, updated.downvotes) == (0, 1)


def test_vote_on_missing_report(lifecycle: ReportLifecycleManager) -> None:
    with pytest.raises(NotFoundError):
        lifecycle.vote(uuid4(), "ben", is_upvote=True)


def test_vote_on_expired_report(
    lifecycle: ReportLifecycleManager, clock: MutableClock, fake_database: FakeDatabase
) -> None:
    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")
    clock.advance(timedelta(hours=24))

    with pytest.raises(InvalidInputError):
        lifecycle.vote(report.id, "ben", is_upvote=True)

    assert fake_database.state.reports[report.id].upvotes == 1


def test_vote_switch_refused_when_counter_would_go_negative(
    lifecycle: ReportLifecycleManager, fake_database: FakeDatabase
) -> None:
    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")
    fake_database.state.reports[report.id].upvotes = 0

    with pytest.raises(InvalidInputError):
        lifecycle.vote(report.id, "ana", is_upvote=False)

    assert fake_database.state.votes[(report.id, "ana")].is_upvote
    assert fake_database.state.reports[report.id].downvotes == 0


def test_start_new_cycle_expires_reports_and_replaces_cycle(
    lifecycle: ReportLifecycleManager, clock: MutableClock, fake_database: FakeDatabase
) -> None:
    first = lifecycle.start_new_cycle()
    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")
    clock.advance(timedelta(hours=2))

    second = lifecycle.start_new_cycle()

    cycles = fake_database.state.cycles
    assert not cycles[first.id].is_active
    assert cycles[second.id].is_active
    assert second.end_date == clock.now + timedelta(days=7)
    assert not fake_database.state.reports[report.id].is_active(clock.now)
    assert lifecycle.active_cycle() is not None


def test_start_new_cycle_is_all_or_nothing(
    lifecycle: ReportLifecycleManager, fake_database: FakeDatabase
) -> None:
    first = lifecycle.start_new_cycle()
    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")
    commits = fake_database.commits
    fake_database.failing.add("reports.expire_active")

    with pytest.raises(CycleResetConflictError):
        lifecycle.start_new_cycle()

    assert fake_database.commits == commits
    assert list(fake_database.state.cycles) == [first.id]
    assert fake_database.state.cycles[first.id].is_active
    assert fake_database.state.reports[report.id].is_active(NOW)


def test_record_official_import_requires_active_cycle(
    lifecycle: ReportLifecycleManager, clock: MutableClock
) -> None:
    with pytest.raises(NotFoundError):
        lifecycle.record_official_import()

    cycle = lifecycle.start_new_cycle()
    clock.advance(timedelta(hours=1))
    stamped = lifecycle.record_official_import()

    assert stamped.id == cycle.id
    active = lifecycle.active_cycle()
    assert active is not None
    assert active.official_import_timestamp == clock.now


def test_record_official_import_warns_outside_cycle(
    lifecycle: ReportLifecycleManager, clock: MutableClock, caplog: pytest.LogCaptureFixture
) -> None:
    cycle = lifecycle.start_new_cycle()

    with caplog.at_level(logging.WARNING):
        lifecycle.record_official_import(clock.now + timedelta(hours=1))
    assert "falls outside" not in caplog.text

    late = cycle.end_date + timedelta(minutes=5)
    with caplog.at_level(logging.WARNING):
        stamped = lifecycle.record_official_import(late)

    assert f"falls outside cycle {cycle.id}" in caplog.text
    assert stamped.official_import_timestamp == late


def test_verification_stats_for_active_report(
    lifecycle: ReportLifecycleManager, clock: MutableClock
) -> None:
    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")
    lifecycle.vote(report.id, "ben", is_upvote=False)
    clock.advance(timedelta(hours=6))

    stats = lifecycle.verification_stats(report.id)

    assert stats.confirmed_count == 1
    assert stats.disputed_count == 1
    assert stats.recency_label == "6 hours ago"
    assert stats.confidence == pytest.approx(0.7 * 0.5 + 0.3 * 0.75)
    assert not stats.is_reliable

    clock.advance(timedelta(hours=18))
    with pytest.raises(NotFoundError):
        lifecycle.verification_stats(report.id)
