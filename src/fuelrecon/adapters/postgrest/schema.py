"""Pydantic models describing rows returned by the price feed."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _none_to_zero(value: object) -> object:
    return 0.0 if value is None else value


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class FeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FuelPriceRow(FeedBaseModel):
    id: UUID
    area: str
    brand: str
    fuel_type: str
    min_price: float = 0.0
    max_price: float = 0.0
    common_price: float = 0.0
    week_of: date

    _zero_fill = field_validator("min_price", "max_price", "common_price", mode="before")(
        _none_to_zero
    )


class WeekRow(FeedBaseModel):
    week_of: date


class OperatingHoursPayload(FeedBaseModel):
    open: str | None = None
    close: str | None = None
    is_24_hours: bool = Field(default=False, alias="is24Hours")
    days_open: list[str] = Field(default_factory=list, alias="daysOpen")

    _normalize_times = field_validator("open", "close", mode="before")(_blank_to_none)


class GasStationRow(FeedBaseModel):
    id: UUID
    name: str
    brand: str
    city: str
    address: str | None = None
    latitude: float
    longitude: float
    amenities: list[str] = Field(default_factory=list)
    operating_hours: OperatingHoursPayload | None = None
    status: str = "active"

    @field_validator("amenities", mode="before")
    @classmethod
    def _null_amenities(cls, value: object) -> object:
        return [] if value is None else value
