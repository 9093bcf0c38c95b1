"""Ports for persisting community reports, votes and reporting cycles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from fuelrecon.domain.model import CommunityReport, ReportingCycle, ReportVote

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import datetime
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ReportRepository(Repository[CommunityReport], Protocol):
    def get(self, report_id: UUID, *, for_update: bool = False) -> CommunityReport | None:
        """Return a report; ``for_update`` locks the row until the unit of work ends."""
        ...

    def active_for_stations(
        self, station_ids: Collection[UUID], now: datetime
    ) -> Sequence[CommunityReport]: ...

    def adjust_votes(
        self, report_id: UUID, *, upvotes: int, downvotes: int
    ) -> CommunityReport | None:
        """Add the deltas to the stored counters in one statement.

        Returns the refreshed report, or ``None`` when the report is missing or a
        counter would drop below zero.
        """
        ...

    def expire_active(self, now: datetime, *, expired_at: datetime) -> int:
        """Move ``expires_at`` of every report still active at ``now`` to ``expired_at``."""
        ...

    def count_active(self, now: datetime) -> int: ...


@runtime_checkable
class VoteLedger(Repository[ReportVote], Protocol):
    def get(self, report_id: UUID, user_id: str) -> ReportVote | None: ...

    def count_for_report(self, report_id: UUID) -> tuple[int, int]:
        """Return ``(upvotes, downvotes)`` recorded for a report."""
        ...


@runtime_checkable
class CycleRepository(Repository[ReportingCycle], Protocol):
    def active(self) -> ReportingCycle | None: ...

    def deactivate_all(self) -> int: ...

    def count_active(self) -> int: ...
