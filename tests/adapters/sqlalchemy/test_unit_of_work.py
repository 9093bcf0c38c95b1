from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
from sqlalchemy import create_engine

from fuelrecon.adapters.sqlalchemy.repositories import SqlAlchemyVoteLedger
from fuelrecon.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReportingUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from fuelrecon.domain.errors import UpstreamUnavailableError
from fuelrecon.domain.model import ReportVote
from fuelrecon.domain.reporting import ReportLifecycleManager
from tests.helpers.fuel import MutableClock, make_report

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path
    from uuid import UUID


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_sqlalchemy_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyReportingUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_unit_of_work_persists_reports(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReportingUnitOfWork],
) -> None:
    report = make_report(uuid4())

    with sqlite_unit_of_work() as uow:
        uow.repositories.reports.add(report)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        loaded = uow.repositories.reports.get(report.id)
        assert loaded is not None
        assert loaded.price == pytest.approx(report.price)


def test_unit_of_work_rolls_back_on_error(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReportingUnitOfWork],
) -> None:
    report = make_report(uuid4())

    with pytest.raises(RuntimeError, match="boom"), sqlite_unit_of_work() as uow:
        uow.repositories.reports.add(report)
        uow.session.flush()
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.reports.get(report.id) is None


def test_unit_of_work_translates_database_errors(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReportingUnitOfWork],
) -> None:
    report = make_report(uuid4())

    with pytest.raises(UpstreamUnavailableError) as exc, sqlite_unit_of_work() as uow:
        uow.repositories.reports.add(report)
        uow.repositories.votes.add(ReportVote(report_id=report.id, user_id="ana", is_upvote=True))
        uow.repositories.votes.add(ReportVote(report_id=report.id, user_id="ana", is_upvote=False))
        uow.commit()

    assert exc.value.source == "community_report"
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.reports.get(report.id) is None


def test_repositories_unavailable_outside_context(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReportingUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_lifecycle_against_database(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReportingUnitOfWork],
) -> None:
    clock = MutableClock()
    lifecycle = ReportLifecycleManager(unit_of_work_factory=sqlite_unit_of_work, clock=clock)

    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")
    lifecycle.vote(report.id, "ben", is_upvote=True)
    lifecycle.vote(report.id, "cy", is_upvote=True)
    lifecycle.vote(report.id, "cy", is_upvote=False)

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.reports.get(report.id)
        assert stored is not None
        assert (stored.upvotes, stored.downvotes) == (2, 1)
        assert uow.repositories.votes.count_for_report(report.id) == (2, 1)

    first = lifecycle.start_new_cycle()
    second = lifecycle.start_new_cycle()

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.cycles.count_active() == 1
        active = uow.repositories.cycles.active()
        assert active is not None
        assert active.id == second.id
        assert active.id != first.id
        assert uow.repositories.reports.count_active(clock.now) == 0


def test_interleaved_votes_keep_counters_in_step_with_ledger(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'votes.db'}", future=True)
    startup(engine=engine, force=True)
    lifecycle = ReportLifecycleManager(
        unit_of_work_factory=SqlAlchemyReportingUnitOfWork, clock=MutableClock()
    )
    report = lifecycle.submit_report(uuid4(), "Diesel", 57.9, "ana")

    original_get = SqlAlchemyVoteLedger.get
    interleaved: list[str] = []

    def get_with_concurrent_vote(
        self: SqlAlchemyVoteLedger, report_id: UUID, user_id: str
    ) -> ReportVote | None:
        # bob's vote commits after cy's unit of work has read the report
        if not interleaved:
            interleaved.append(user_id)
            lifecycle.vote(report_id, "bob", is_upvote=True)
        return original_get(self, report_id, user_id)

    monkeypatch.setattr(SqlAlchemyVoteLedger, "get", get_with_concurrent_vote)

    updated = lifecycle.vote(report.id, "cy", is_upvote=True)

    assert interleaved == ["cy"]
    assert (updated.upvotes, updated.downvotes) == (3, 0)
    with SqlAlchemyReportingUnitOfWork() as uow:
        stored = uow.repositories.reports.get(report.id)
        assert stored is not None
        assert (stored.upvotes, stored.downvotes) == (3, 0)
        assert uow.repositories.votes.count_for_report(report.id) == (3, 0)
