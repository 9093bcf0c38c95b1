"""Transaction boundary the report lifecycle runs its writes in."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from fuelrecon.domain.ports.persistence import (
        CycleRepository,
        ReportRepository,
        VoteLedger,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Repositories sharing one transaction."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Commits or rolls back every repository in ``repositories`` together.

    Leaving the ``with`` block without ``commit()`` discards the changes.
    """

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class ReportingRepositories(RepositoryCollection):
    """Repositories touched by report submission, voting and cycle resets."""

    reports: ReportRepository
    votes: VoteLedger
    cycles: CycleRepository


type ReportingUnitOfWork = UnitOfWork[ReportingRepositories]
