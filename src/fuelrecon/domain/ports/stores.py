"""Read-side ports for official prices and stations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from fuelrecon.domain.model import Coordinates, PriceRecord, Station


@runtime_checkable
class PriceStore(Protocol):
    """Source of official price batches.

    Implementations raise ``UpstreamUnavailableError`` when the backing service fails.
    """

    def latest_records(self) -> Sequence[PriceRecord]:
        """Return every record of the most recent period."""
        ...

    def records_for(self, area: str, brand: str) -> Sequence[PriceRecord]:
        """Return records for one area and brand, newest period first."""
        ...

    def recent_periods(self, periods: int) -> Sequence[PriceRecord]:
        """Return every record belonging to the ``periods`` most recent periods."""
        ...


@runtime_checkable
class StationStore(Protocol):
    def get(self, station_id: UUID) -> Station | None: ...

    def by_city(self, city: str) -> Sequence[Station]: ...

    def within_radius(self, origin: Coordinates, radius_km: float) -> Sequence[Station]:
        """Return stations within ``radius_km`` of ``origin``, nearest first."""
        ...
