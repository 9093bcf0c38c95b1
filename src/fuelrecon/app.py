"""Application orchestration entry points."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from fuelrecon.adapters.postgrest import (
    PostgrestFeed,
    PostgrestPriceStore,
    PostgrestStationStore,
    parse_price_records,
)
from fuelrecon.adapters.sqlalchemy import (
    SqlAlchemyPriceStore,
    SqlAlchemyReportingUnitOfWork,
    SqlAlchemyStationStore,
    session_factory,
    startup,
)
from fuelrecon.adapters.sqlalchemy.unit_of_work import is_started
from fuelrecon.config import (
    ReconciliationConfig,
    get_price_feed_config,
    get_reconciliation_config,
    price_feed_configured,
)
from fuelrecon.domain.model import Coordinates
from fuelrecon.domain.reconciliation import (
    Aggregator,
    ConfidenceScorer,
    Matcher,
    ReconciliationEngine,
)
from fuelrecon.domain.reporting import ReportLifecycleManager
from fuelrecon.domain.time_windows import utcnow

if TYPE_CHECKING:
    from pathlib import Path
    from uuid import UUID

    from fuelrecon.domain.model import CommunityReport, ReportingCycle
    from fuelrecon.domain.ports import PriceStore, StationStore
    from fuelrecon.domain.reconciliation import AggregatedPrice, PriceHistoryPoint
    from fuelrecon.domain.reporting import ReportingUnitOfWorkFactory
    from fuelrecon.domain.time_windows import Clock

log = getLogger(__name__)


def _ensure_database() -> None:
    if not is_started():
        startup()


def build_engine(
    *,
    config: ReconciliationConfig | None = None,
    price_store: PriceStore | None = None,
    station_store: StationStore | None = None,
    unit_of_work_factory: ReportingUnitOfWorkFactory | None = None,
    clock: Clock = utcnow,
) -> ReconciliationEngine:
    """Wire stores, the report lifecycle and the aggregator into one engine.

    Official prices and stations come from the hosted feed when it is configured,
    otherwise from the local database. Community data always lives locally.
    """

    effective_config = config or get_reconciliation_config()
    use_feed = price_feed_configured()
    needs_local_stores = (price_store is None or station_store is None) and not use_feed
    if unit_of_work_factory is None or needs_local_stores:
        _ensure_database()

    if price_store is None or station_store is None:
        if use_feed:
            feed = PostgrestFeed(config=get_price_feed_config())
            log.info("Reading official prices and stations from %s", feed.config.base_url)
            price_store = price_store or PostgrestPriceStore(feed)
            station_store = station_store or PostgrestStationStore(feed)
        else:
            factory = session_factory()
            price_store = price_store or SqlAlchemyPriceStore(factory)
            station_store = station_store or SqlAlchemyStationStore(factory)

    effective_uow = unit_of_work_factory or SqlAlchemyReportingUnitOfWork
    lifecycle = ReportLifecycleManager(
        unit_of_work_factory=effective_uow,
        stations=station_store,
        clock=clock,
        validity_window=effective_config.report_validity,
        cycle_length=effective_config.cycle_length,
    )
    scorer = ConfidenceScorer(validity_window=effective_config.report_validity)
    aggregator = Aggregator(matcher=Matcher(scorer=scorer), top_n=effective_config.top_n)
    return ReconciliationEngine(
        prices=price_store,
        stations=station_store,
        unit_of_work_factory=effective_uow,
        lifecycle=lifecycle,
        aggregator=aggregator,
        clock=clock,
    )


def reconcile_station(
    station_id: UUID, *, engine: ReconciliationEngine | None = None
) -> list[AggregatedPrice]:
    return (engine or build_engine()).reconcile_station_id(station_id)


def reconcile_city(
    city: str, *, engine: ReconciliationEngine | None = None
) -> dict[str, list[AggregatedPrice]]:
    return (engine or build_engine()).reconcile_city(city)


def reconcile_nearby(
    latitude: float,
    longitude: float,
    *,
    radius_km: float | None = None,
    engine: ReconciliationEngine | None = None,
) -> dict[str, list[AggregatedPrice]]:
    radius = radius_km if radius_km is not None else get_reconciliation_config().nearby_radius_km
    return (engine or build_engine()).reconcile_nearby(Coordinates(latitude, longitude), radius)


def price_history(
    area: str,
    fuel_type: str,
    *,
    periods: int | None = None,
    engine: ReconciliationEngine | None = None,
) -> list[PriceHistoryPoint]:
    effective = engine or build_engine()
    if periods is None:
        return effective.price_history(area, fuel_type)
    return effective.price_history(area, fuel_type, periods=periods)


def submit_price_report(
    station_id: UUID,
    fuel_type: str,
    price: float,
    user_id: str,
    *,
    engine: ReconciliationEngine | None = None,
) -> CommunityReport:
    return (engine or build_engine()).submit_report(station_id, fuel_type, price, user_id)


def vote_on_report(
    report_id: UUID,
    user_id: str,
    *,
    is_upvote: bool,
    engine: ReconciliationEngine | None = None,
) -> CommunityReport:
    return (engine or build_engine()).vote(report_id, user_id, is_upvote)


def start_new_cycle(*, engine: ReconciliationEngine | None = None) -> ReportingCycle:
    return (engine or build_engine()).start_new_cycle()


def current_cycle(*, engine: ReconciliationEngine | None = None) -> ReportingCycle | None:
    return (engine or build_engine()).active_cycle()


def import_official_prices(path: Path) -> int:
    """Load a JSON array of price rows into the local database.

    The active reporting cycle, if any, is stamped with the import time.
    """

    _ensure_database()
    with path.open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON array of price rows")

    records = parse_price_records(payload)
    stored = SqlAlchemyPriceStore(session_factory()).ingest_batch(records)

    lifecycle = ReportLifecycleManager(unit_of_work_factory=SqlAlchemyReportingUnitOfWork)
    if lifecycle.active_cycle() is not None:
        lifecycle.record_official_import()
    log.info("Imported %s of %s price rows from %s", stored, len(payload), path)
    return stored
