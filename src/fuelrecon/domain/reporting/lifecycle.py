"""Submission, voting, expiry and cycle resets for community price reports."""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Final

from fuelrecon.domain.errors import (
    CycleResetConflictError,
    InvalidInputError,
    NotFoundError,
    UpstreamUnavailableError,
)
from fuelrecon.domain.model import CommunityReport, ReportingCycle, ReportVote, vote_delta
from fuelrecon.domain.reconciliation.confidence import ConfidenceScorer
from fuelrecon.domain.reconciliation.contracts import Verification
from fuelrecon.domain.time_windows import DEFAULT_VALIDITY_WINDOW, recency_label, utcnow

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from datetime import datetime
    from uuid import UUID

    from fuelrecon.domain.ports import ReportingUnitOfWork, StationStore
    from fuelrecon.domain.time_windows import Clock

type ReportingUnitOfWorkFactory = Callable[[], ReportingUnitOfWork]

log = logging.getLogger(__name__)

DEFAULT_CYCLE_LENGTH: Final = timedelta(days=7)
# how far into the past a cycle reset moves outstanding expiries
FORCED_EXPIRY_OFFSET: Final = timedelta(seconds=1)


def _validated_price(price: object) -> float:
    if isinstance(price, bool) or not isinstance(price, int | float):
        raise InvalidInputError(f"Price must be a number, got {price!r}")
    value = float(price)
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"Price must be greater than zero, got {price!r}")
    return value


def _validated_text(value: str | None, name: str) -> str:
    cleaned = " ".join((value or "").split())
    if not cleaned:
        raise InvalidInputError(f"{name} must not be empty")
    return cleaned


@dataclass(slots=True)
class ReportLifecycleManager:
    """State transitions for community reports and reporting cycles.

    Each operation runs inside exactly one unit of work. Cycle resets are also
    serialized through ``cycle_lock`` so that stores without cross-statement
    atomicity never expose two active cycles.
    """

    unit_of_work_factory: ReportingUnitOfWorkFactory
    stations: StationStore | None = None
    clock: Clock = utcnow
    validity_window: timedelta = DEFAULT_VALIDITY_WINDOW
    cycle_length: timedelta = DEFAULT_CYCLE_LENGTH
    cycle_lock: AbstractContextManager[object] = field(default_factory=threading.Lock)

    def submit_report(
        self,
        station_id: UUID,
        fuel_type: str,
        price: float,
        user_id: str,
    ) -> CommunityReport:
        value = _validated_price(price)
        fuel = _validated_text(fuel_type, "Fuel type")
        user = _validated_text(user_id, "User id")
        if self.stations is not None and self.stations.get(station_id) is None:
            raise NotFoundError("Station", station_id)

        now = self.clock()
        report = CommunityReport(
            station_id=station_id,
            fuel_type=fuel,
            price=value,
            user_id=user,
            reported_at=now,
            expires_at=now + self.validity_window,
            upvotes=1,
            downvotes=0,
        )
        # the submitter's implicit confirmation is a ledger entry like any other vote
        submitter_vote = ReportVote(report_id=report.id, user_id=user, is_upvote=True, voted_at=now)
        with self.unit_of_work_factory() as uow:
            uow.repositories.reports.add(report)
            uow.repositories.votes.add(submitter_vote)
            uow.commit()
        log.info(
            "Report %s submitted for station %s (%s @ %.2f)", report.id, station_id, fuel, value
        )
        return report

    def vote(self, report_id: UUID, user_id: str, *, is_upvote: bool) -> CommunityReport:
        """Record one user's vote and move the report's counters by the matching delta.

        The counters change in a single ``UPDATE`` relative to their stored values,
        so concurrent votes on the same report never overwrite each other.
        """

        user = _validated_text(user_id, "User id")
        now = self.clock()
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            report = repositories.reports.get(report_id, for_update=True)
            if report is None:
                raise NotFoundError("Report", report_id)
            if not report.is_active(now):
                raise InvalidInputError(f"Report {report_id} has expired")

            prior = repositories.votes.get(report_id, user)
            delta = vote_delta(None if prior is None else prior.is_upvote, is_upvote=is_upvote)
            if delta is None:
                log.debug("Vote by %s on %s unchanged", user, report_id)
                return report
            if prior is None:
                repositories.votes.add(
                    ReportVote(report_id=report_id, user_id=user, is_upvote=is_upvote, voted_at=now)
                )
            else:
                prior.is_upvote = is_upvote
                prior.voted_at = now
            upvotes, downvotes = delta
            updated = repositories.reports.adjust_votes(
                report_id, upvotes=upvotes, downvotes=downvotes
            )
            if updated is None:
                raise InvalidInputError(f"Report {report_id} has no opposite vote to switch")
            uow.commit()

        log.info(
            "Vote on report %s by %s: up=%s down=%s",
            report_id,
            user,
            updated.upvotes,
            updated.downvotes,
        )
        return updated

    def start_new_cycle(self) -> ReportingCycle:
        """Deactivate the current cycle, open a new one and expire every live report.

        All three effects commit together or not at all.
        """

        with self.cycle_lock:
            now = self.clock()
            cycle = ReportingCycle(start_date=now, end_date=now + self.cycle_length, created_at=now)
            try:
                with self.unit_of_work_factory() as uow:
                    repositories = uow.repositories
                    deactivated = repositories.cycles.deactivate_all()
                    repositories.cycles.add(cycle)
                    expired = repositories.reports.expire_active(
                        now, expired_at=now - FORCED_EXPIRY_OFFSET
                    )
                    active_cycles = repositories.cycles.count_active()
                    live_reports = repositories.reports.count_active(now)
                    if active_cycles != 1 or live_reports != 0:
                        raise CycleResetConflictError(
                            f"Cycle reset left {active_cycles} active cycles "
                            f"and {live_reports} live reports"
                        )
                    uow.commit()
            except UpstreamUnavailableError as exc:
                raise CycleResetConflictError(f"Cycle reset was not applied: {exc}") from exc

        log.info(
            "Started cycle %s (deactivated=%s, expired_reports=%s)", cycle.id, deactivated, expired
        )
        return cycle

    def active_cycle(self) -> ReportingCycle | None:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.cycles.active()

    def record_official_import(self, imported_at: datetime | None = None) -> ReportingCycle:
        """Stamp the active cycle with the time the official batch arrived."""

        stamp = imported_at or self.clock()
        with self.unit_of_work_factory() as uow:
            cycle = uow.repositories.cycles.active()
            if cycle is None:
                raise NotFoundError("Active reporting cycle", None)
            if not cycle.contains(stamp):
                log.warning(
                    "Official import at %s falls outside cycle %s (%s to %s)",
                    stamp.isoformat(),
                    cycle.id,
                    cycle.start_date.isoformat(),
                    cycle.end_date.isoformat(),
                )
            cycle.official_import_timestamp = stamp
            uow.commit()
        return cycle

    def verification_stats(
        self, report_id: UUID, *, scorer: ConfidenceScorer | None = None
    ) -> Verification:
        effective_scorer = scorer or ConfidenceScorer(validity_window=self.validity_window)
        now = self.clock()
        with self.unit_of_work_factory() as uow:
            report = uow.repositories.reports.get(report_id)
            if report is None or not report.is_active(now):
                raise NotFoundError("Report", report_id)
        return Verification(
            report_id=report.id,
            confirmed_count=report.upvotes,
            disputed_count=report.downvotes,
            recency_label=recency_label(report.reported_at, now),
            confidence=effective_scorer.report_confidence(report, now),
            expires_at=report.expires_at,
        )


__all__ = ["DEFAULT_CYCLE_LENGTH", "ReportLifecycleManager", "ReportingUnitOfWorkFactory"]
