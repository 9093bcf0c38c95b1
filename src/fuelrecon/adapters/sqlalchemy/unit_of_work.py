"""SQLAlchemy-backed unit of work for community reports and reporting cycles."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fuelrecon.adapters.sqlalchemy.mappings import start_mappers
from fuelrecon.adapters.sqlalchemy.migrations import upgrade_head
from fuelrecon.adapters.sqlalchemy.repositories import (
    SqlAlchemyCycleRepository,
    SqlAlchemyReportRepository,
    SqlAlchemyVoteLedger,
)
from fuelrecon.config import get_database_config
from fuelrecon.domain.errors import UpstreamUnavailableError
from fuelrecon.domain.ports.unit_of_work import ReportingRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before ``startup()`` or configured twice."""


@dataclass(slots=True)
class _AdapterState:
    """The process-wide engine shared by units of work and read-only stores."""

    engine: Engine | None = None
    factory: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        # loaded reports outlive their session in the engine's results
        self.factory = sessionmaker(bind=engine, expire_on_commit=False)

    def reset(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.factory = None

    def sessions(self) -> sessionmaker[Session]:
        if self.factory is None:
            raise StartupError(
                "Database not started; call fuelrecon.adapters.sqlalchemy.startup() first"
            )
        return self.factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to an engine after bringing its schema to the newest revision."""

    if _STATE.engine is not None and not force:
        raise StartupError("Database already started; pass force=True to rebind")

    target = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=target)
    if _STATE.engine is not None and _STATE.engine is not target:
        _STATE.engine.dispose()
    _STATE.bind(target)
    log.debug("Reports database ready at %s", target.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def session_factory() -> sessionmaker[Session]:
    """Session factory for the read-only stores sharing the adapter's engine."""

    return _STATE.sessions()


def shutdown() -> None:
    """Dispose the engine and forget it; ``startup()`` may be called again."""

    _STATE.reset()


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session and one transaction per ``with`` block.

    Database failures surface as ``UpstreamUnavailableError`` naming ``source``,
    after the transaction has been rolled back.
    """

    source: str = "database"

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.sessions()
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self.session_factory()
        self._repositories = self._build_repositories(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        if isinstance(exc_value, SQLAlchemyError):
            log.warning("Rolled back %s unit of work: %s", self.source, exc_value)
            raise UpstreamUnavailableError(self.source, str(exc_value)) from exc_value
        return False

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise UpstreamUnavailableError(self.source, str(exc)) from exc

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Repositories are only available inside the unit of work")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session


class SqlAlchemyReportingUnitOfWork(BaseSqlAlchemyUnitOfWork[ReportingRepositories]):
    """Unit of work for report submission, voting and cycle resets."""

    source = "community_report"

    def _build_repositories(self, session: Session) -> ReportingRepositories:
        return ReportingRepositories(
            reports=SqlAlchemyReportRepository(session),
            votes=SqlAlchemyVoteLedger(session),
            cycles=SqlAlchemyCycleRepository(session),
        )


if TYPE_CHECKING:
    from fuelrecon.domain.ports import ReportingUnitOfWork

    _uow_check: ReportingUnitOfWork = SqlAlchemyReportingUnitOfWork()
