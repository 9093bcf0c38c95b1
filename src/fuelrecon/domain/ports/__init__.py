"""Ports consumed by the reconciliation engine and report lifecycle."""

from __future__ import annotations

from fuelrecon.domain.ports.persistence import (
    CycleRepository,
    ReportRepository,
    Repository,
    VoteLedger,
)
from fuelrecon.domain.ports.stores import PriceStore, StationStore
from fuelrecon.domain.ports.unit_of_work import (
    ReportingRepositories,
    ReportingUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CycleRepository",
    "PriceStore",
    "ReportRepository",
    "ReportingRepositories",
    "ReportingUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "StationStore",
    "UnitOfWork",
    "VoteLedger",
]
