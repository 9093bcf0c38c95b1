"""Physical fuel stations."""

from __future__ import annotations

from dataclasses import dataclass, field

from fuelrecon.domain.model.entity import Entity
from fuelrecon.domain.model.enums import StationStatus


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def __composite_values__(self) -> tuple[float, float]:
        """For SQLAlchemy composite columns (adapter-side convenience)."""
        return (self.latitude, self.longitude)


@dataclass(frozen=True, kw_only=True)
class OperatingHours:
    opens_at: str | None = None
    closes_at: str | None = None
    is_24_hours: bool = False
    days_open: tuple[str, ...] = ()


@dataclass(eq=False, kw_only=True)
class Station(Entity):
    name: str
    brand: str
    city: str
    coordinates: Coordinates
    address: str = ""
    amenities: list[str] = field(default_factory=list)
    operating_hours: OperatingHours | None = None
    status: StationStatus = StationStatus.ACTIVE

    @property
    def is_operational(self) -> bool:
        return self.status is StationStatus.ACTIVE
