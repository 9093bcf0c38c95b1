from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from fuelrecon.app import (
    current_cycle,
    import_official_prices,
    price_history,
    reconcile_city,
    reconcile_nearby,
    reconcile_station,
    start_new_cycle,
    submit_price_report,
    vote_on_report,
)
from fuelrecon.config import configure_logging
from fuelrecon.domain.errors import FuelReconError
from fuelrecon.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import FrameType

    from fuelrecon.domain.model import ReportingCycle
    from fuelrecon.domain.reconciliation import AggregatedPrice

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile official and community fuel prices")
    subparsers = parser.add_subparsers(dest="command", required=True)

    station = subparsers.add_parser("station", help="Best prices at one station")
    station.add_argument("station_id", type=str, help="Station id")

    city = subparsers.add_parser("city", help="Cheapest prices per fuel type in a city")
    city.add_argument("name", type=str, help="City name, e.g. 'Makati' or 'Quezon City'")

    nearby = subparsers.add_parser("nearby", help="Cheapest prices around a location")
    nearby.add_argument("--lat", type=float, required=True, help="Latitude in degrees")
    nearby.add_argument("--lon", type=float, required=True, help="Longitude in degrees")
    nearby.add_argument(
        "--radius-km",
        type=float,
        default=None,
        help="Search radius in kilometres (defaults to config)",
    )

    report = subparsers.add_parser("report", help="Submit a community price report")
    report.add_argument("--station-id", type=str, required=True, help="Station id")
    report.add_argument("--fuel-type", type=str, required=True, help="Fuel type as displayed")
    report.add_argument("--price", type=float, required=True, help="Observed price per litre")
    report.add_argument("--user-id", type=str, required=True, help="Reporting user")

    vote = subparsers.add_parser("vote", help="Confirm or dispute a community report")
    vote.add_argument("report_id", type=str, help="Report id")
    vote.add_argument("--user-id", type=str, required=True, help="Voting user")
    direction = vote.add_mutually_exclusive_group(required=True)
    direction.add_argument("--up", dest="is_upvote", action="store_true", help="Confirm")
    direction.add_argument("--down", dest="is_upvote", action="store_false", help="Dispute")

    subparsers.add_parser("new-cycle", help="Start a new reporting cycle")
    subparsers.add_parser("cycle", help="Show the active reporting cycle")

    history = subparsers.add_parser("history", help="Official price history for an area")
    history.add_argument("--area", type=str, required=True, help="Area or city")
    history.add_argument("--fuel-type", type=str, required=True, help="Fuel type")
    history.add_argument("--periods", type=int, default=None, help="Number of periods")

    import_prices = subparsers.add_parser(
        "import-prices", help="Load an official price batch from a JSON file"
    )
    import_prices.add_argument("path", type=Path, help="JSON array of price rows")

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _describe(entry: AggregatedPrice) -> str:
    station = entry.station.name if entry.station is not None else "(unmatched)"
    price = f"{entry.display_price:.2f}" if entry.display_price is not None else "n/a"
    parts = [f"{station}: {price}", f"source={entry.source or 'none'}", f"match={entry.level}"]
    if entry.verification is not None:
        verification = entry.verification
        parts.append(
            f"votes=+{verification.confirmed_count}/-{verification.disputed_count}"
            f" ({verification.recency_label})"
        )
    if entry.distance_km is not None:
        parts.append(f"{entry.distance_km:.1f} km")
    return ", ".join(parts)


def _log_station(entries: Sequence[AggregatedPrice]) -> None:
    if not entries:
        log.info("No prices available")
    for entry in entries:
        log.info("%s  %s", entry.fuel_type, _describe(entry))


def _log_area(results: Mapping[str, Sequence[AggregatedPrice]]) -> None:
    if not results:
        log.info("No prices available")
    for fuel_type, entries in results.items():
        log.info("%s", fuel_type)
        for rank, entry in enumerate(entries, start=1):
            log.info("  %d. %s", rank, _describe(entry))


def _log_cycle(cycle: ReportingCycle) -> None:
    imported = cycle.official_import_timestamp
    log.info(
        "Cycle %s: %s day(s) remaining, official prices %s",
        cycle.id,
        cycle.days_remaining(utcnow()),
        f"imported {imported.isoformat()}" if imported is not None else "not yet imported",
    )


def _run(args: argparse.Namespace) -> None:  # noqa: C901
    if args.command == "station":
        _log_station(reconcile_station(_parse_uuid(args.station_id)))
    elif args.command == "city":
        _log_area(reconcile_city(args.name))
    elif args.command == "nearby":
        _log_area(reconcile_nearby(args.lat, args.lon, radius_km=args.radius_km))
    elif args.command == "report":
        report = submit_price_report(
            _parse_uuid(args.station_id), args.fuel_type, args.price, args.user_id
        )
        log.info("Submitted report %s (expires %s)", report.id, report.expires_at.isoformat())
    elif args.command == "vote":
        report = vote_on_report(_parse_uuid(args.report_id), args.user_id, is_upvote=args.is_upvote)
        log.info("Report %s now +%s/-%s", report.id, report.upvotes, report.downvotes)
    elif args.command == "new-cycle":
        cycle = start_new_cycle()
        log.info("Started cycle %s ending %s", cycle.id, cycle.end_date.isoformat())
        _log_cycle(cycle)
    elif args.command == "cycle":
        active = current_cycle()
        if active is None:
            log.info("No active reporting cycle")
        else:
            _log_cycle(active)
    elif args.command == "history":
        points = price_history(args.area, args.fuel_type, periods=args.periods)
        if not points:
            log.info("No history available")
        for point in points:
            log.info(
                "%s  %.2f  (%s)",
                point.period_start.isoformat(),
                point.common_price,
                point.record.area,
            )
    elif args.command == "import-prices":
        stored = import_official_prices(args.path)
        log.info("Imported %s price records", stored)
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        _run(parsed_args)
    except FuelReconError as exc:
        log.error("%s", exc.user_message)  # noqa: TRY400
        log.debug("Request failed", exc_info=exc)
        sys.exit(1)
    except ValueError as exc:
        log.error("Invalid input: %s", exc)  # noqa: TRY400
        sys.exit(2)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
