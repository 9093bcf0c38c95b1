"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import func, select, update

from fuelrecon.adapters.sqlalchemy.mappings import (
    community_report_table,
    report_vote_table,
    reporting_cycle_table,
)
from fuelrecon.domain.model import CommunityReport, ReportingCycle, ReportVote

if TYPE_CHECKING:
    from collections.abc import Collection
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session


def _rowcount(result: object) -> int:
    return cast("CursorResult[Any]", result).rowcount


class SqlAlchemyReportRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CommunityReport) -> None:
        self.session.add(entity)

    def get(self, report_id: UUID, *, for_update: bool = False) -> CommunityReport | None:
        stmt = select(CommunityReport).where(community_report_table.c.id == report_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.session.execute(stmt).scalar_one_or_none()

    def active_for_stations(
        self, station_ids: Collection[UUID], now: datetime
    ) -> list[CommunityReport]:
        if not station_ids:
            return []
        stmt = (
            select(CommunityReport)
            .where(community_report_table.c.station_id.in_(list(station_ids)))
            .where(community_report_table.c.expires_at > now)
            .order_by(community_report_table.c.reported_at.desc())
        )
        return list(self.session.execute(stmt).scalars())

    def adjust_votes(
        self, report_id: UUID, *, upvotes: int, downvotes: int
    ) -> CommunityReport | None:
        up = community_report_table.c.upvotes
        down = community_report_table.c.downvotes
        stmt = (
            update(CommunityReport)
            .where(community_report_table.c.id == report_id)
            .where(up + upvotes >= 0)
            .where(down + downvotes >= 0)
            .values(upvotes=up + upvotes, downvotes=down + downvotes)
            .execution_options(synchronize_session=False)
        )
        if _rowcount(self.session.execute(stmt)) == 0:
            return None
        return self.get(report_id, for_update=True)

    def expire_active(self, now: datetime, *, expired_at: datetime) -> int:
        stmt = (
            update(CommunityReport)
            .where(community_report_table.c.expires_at > now)
            .values(expires_at=expired_at)
            .execution_options(synchronize_session="fetch")
        )
        return _rowcount(self.session.execute(stmt))

    def count_active(self, now: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(community_report_table)
            .where(community_report_table.c.expires_at > now)
        )
        return self.session.execute(stmt).scalar_one()


class SqlAlchemyVoteLedger:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ReportVote) -> None:
        self.session.add(entity)

    def get(self, report_id: UUID, user_id: str) -> ReportVote | None:
        stmt = (
            select(ReportVote)
            .where(report_vote_table.c.report_id == report_id)
            .where(report_vote_table.c.user_id == user_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def count_for_report(self, report_id: UUID) -> tuple[int, int]:
        stmt = (
            select(report_vote_table.c.is_upvote, func.count())
            .where(report_vote_table.c.report_id == report_id)
            .group_by(report_vote_table.c.is_upvote)
        )
        counts = {bool(is_upvote): int(count) for is_upvote, count in self.session.execute(stmt)}
        return counts.get(True, 0), counts.get(False, 0)


class SqlAlchemyCycleRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ReportingCycle) -> None:
        self.session.add(entity)

    def active(self) -> ReportingCycle | None:
        stmt = (
            select(ReportingCycle)
            .where(reporting_cycle_table.c.is_active.is_(True))
            .order_by(reporting_cycle_table.c.created_at.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def deactivate_all(self) -> int:
        stmt = (
            update(ReportingCycle)
            .where(reporting_cycle_table.c.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        return _rowcount(self.session.execute(stmt))

    def count_active(self) -> int:
        stmt = (
            select(func.count())
            .select_from(reporting_cycle_table)
            .where(reporting_cycle_table.c.is_active.is_(True))
        )
        return self.session.execute(stmt).scalar_one()


if TYPE_CHECKING:
    from fuelrecon.domain.ports import CycleRepository, ReportRepository, VoteLedger

    def _check_ports(session: Session) -> None:
        _reports: ReportRepository = SqlAlchemyReportRepository(session)
        _votes: VoteLedger = SqlAlchemyVoteLedger(session)
        _cycles: CycleRepository = SqlAlchemyCycleRepository(session)
