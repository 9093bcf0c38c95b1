"""SQLAlchemy adapter package for fuelrecon."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCycleRepository,
    SqlAlchemyReportRepository,
    SqlAlchemyVoteLedger,
)
from .stores import SqlAlchemyPriceStore, SqlAlchemyStationStore
from .unit_of_work import (
    SqlAlchemyReportingUnitOfWork,
    StartupError,
    session_factory,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCycleRepository",
    "SqlAlchemyPriceStore",
    "SqlAlchemyReportRepository",
    "SqlAlchemyReportingUnitOfWork",
    "SqlAlchemyStationStore",
    "SqlAlchemyVoteLedger",
    "StartupError",
    "mapper_registry",
    "session_factory",
    "shutdown",
    "start_mappers",
    "startup",
]
