"""Tunable windows and ranking sizes for reconciliation and reporting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import optional_float_env

DEFAULT_REPORT_VALIDITY_HOURS = 24.0
DEFAULT_CYCLE_DAYS = 7.0
DEFAULT_TOP_N = 5
DEFAULT_RADIUS_KM = 10.0


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    report_validity: timedelta = timedelta(hours=DEFAULT_REPORT_VALIDITY_HOURS)
    cycle_length: timedelta = timedelta(days=DEFAULT_CYCLE_DAYS)
    top_n: int = DEFAULT_TOP_N
    nearby_radius_km: float = DEFAULT_RADIUS_KM


def get_reconciliation_config() -> ReconciliationConfig:
    return ReconciliationConfig(
        report_validity=timedelta(
            hours=optional_float_env(
                "FUELRECON_REPORT_VALIDITY_HOURS", DEFAULT_REPORT_VALIDITY_HOURS
            )
        ),
        cycle_length=timedelta(days=optional_float_env("FUELRECON_CYCLE_DAYS", DEFAULT_CYCLE_DAYS)),
        top_n=int(optional_float_env("FUELRECON_TOP_N", DEFAULT_TOP_N)),
        nearby_radius_km=optional_float_env("FUELRECON_RADIUS_KM", DEFAULT_RADIUS_KM),
    )
