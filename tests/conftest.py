from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from fuelrecon.adapters.sqlalchemy import start_mappers
from fuelrecon.adapters.sqlalchemy.migrations import upgrade_head
from fuelrecon.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReportingUnitOfWork,
    shutdown,
    startup,
)
from fuelrecon.domain.reporting import ReportLifecycleManager
from tests.helpers.fakes import FakeDatabase, FakeUnitOfWork
from tests.helpers.fuel import MutableClock

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "FUELRECON_FEED_URL",
        "FUELRECON_FEED_KEY",
        "FUELRECON_REPORT_VALIDITY_HOURS",
        "FUELRECON_CYCLE_DAYS",
        "FUELRECON_TOP_N",
        "FUELRECON_RADIUS_KM",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def fake_unit_of_work(fake_database: FakeDatabase) -> Callable[[], FakeUnitOfWork]:
    def factory() -> FakeUnitOfWork:
        return FakeUnitOfWork(fake_database)

    return factory


@pytest.fixture
def lifecycle(
    fake_unit_of_work: Callable[[], FakeUnitOfWork], clock: MutableClock
) -> ReportLifecycleManager:
    return ReportLifecycleManager(unit_of_work_factory=fake_unit_of_work, clock=clock)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyReportingUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyReportingUnitOfWork:
        return SqlAlchemyReportingUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
