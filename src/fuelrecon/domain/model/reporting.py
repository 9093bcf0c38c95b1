"""Community price reports, the per-user vote ledger, and reporting cycles."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from fuelrecon.domain.model.entity import Entity
from fuelrecon.domain.model.enums import ReportState

if TYPE_CHECKING:
    from uuid import UUID


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class CommunityReport(Entity):
    """A single user-submitted price point for one station and fuel type.

    Vote counters are changed by the report repository as deltas from
    :func:`vote_delta`, so they always agree with the ledger of :class:`ReportVote` rows.
    """

    station_id: UUID
    fuel_type: str
    price: float
    user_id: str
    reported_at: datetime
    expires_at: datetime
    upvotes: int = 1
    downvotes: int = 0

    @property
    def price_value(self) -> float | None:
        return self.price

    @property
    def total_votes(self) -> int:
        return self.upvotes + self.downvotes

    @property
    def vote_ratio(self) -> float:
        if self.total_votes == 0:
            return 0.0
        return self.upvotes / self.total_votes

    @property
    def vote_differential(self) -> int:
        return self.upvotes - self.downvotes

    def is_active(self, now: datetime) -> bool:
        return now < self.expires_at

    def state(self, now: datetime) -> ReportState:
        return ReportState.ACTIVE if self.is_active(now) else ReportState.EXPIRED


def vote_delta(previous: bool | None, *, is_upvote: bool) -> tuple[int, int] | None:
    """Counter change ``(upvotes, downvotes)`` for a vote, given the user's previous one.

    ``None`` means the vote repeats the previous one and changes nothing.
    """

    if previous is None:
        return (1, 0) if is_upvote else (0, 1)
    if previous == is_upvote:
        return None
    return (1, -1) if is_upvote else (-1, 1)


@dataclass(eq=False, kw_only=True)
class ReportVote(Entity):
    """Ledger row; at most one per ``(report_id, user_id)``."""

    report_id: UUID
    user_id: str
    is_upvote: bool
    voted_at: datetime = field(default_factory=_utcnow)


@dataclass(eq=False, kw_only=True)
class ReportingCycle(Entity):
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    official_import_timestamp: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)

    def contains(self, moment: datetime) -> bool:
        return self.start_date <= moment < self.end_date

    def days_remaining(self, now: datetime) -> int:
        remaining = self.end_date - now
        if remaining <= timedelta(0):
            return 0
        return math.ceil(remaining / timedelta(days=1))

    def deactivate(self) -> None:
        self.is_active = False
