"""Official periodic price records."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fuelrecon.domain.model.entity import Entity

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date


def is_valid_price(value: float | None) -> bool:
    """A price is usable only when present, finite and strictly positive.

    Official feeds zero-fill prices they did not collect, so ``0`` means "not reported".
    """

    return value is not None and math.isfinite(value) and value > 0


def count_valid_prices(values: Iterable[float | None]) -> int:
    return sum(1 for value in values if is_valid_price(value))


@dataclass(eq=False, kw_only=True)
class PriceRecord(Entity):
    """One brand + area + fuel type row of an official price batch."""

    area: str
    brand: str
    fuel_type: str
    min_price: float = 0.0
    max_price: float = 0.0
    common_price: float = 0.0
    period_start: date

    @property
    def price_value(self) -> float | None:
        return self.common_price

    @property
    def has_valid_price(self) -> bool:
        return is_valid_price(self.common_price)

    @property
    def has_any_price_data(self) -> bool:
        return self.valid_price_count > 0

    @property
    def valid_price_count(self) -> int:
        return count_valid_prices((self.min_price, self.common_price, self.max_price))
