"""Configuration for the hosted price and station feed."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .env import require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

FEED_URL_ENV = "FUELRECON_FEED_URL"
FEED_KEY_ENV = "FUELRECON_FEED_KEY"


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="price-feed",
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        cache=CacheConfig(ttl_seconds=300.0),
    )


@dataclass(frozen=True, slots=True)
class PriceFeedConfig:
    """Holds connection settings for the PostgREST price feed."""

    base_url: str
    api_key: str
    resilience: ResilienceConfig = field(default_factory=_default_resilience)

    @classmethod
    def from_environment(cls) -> PriceFeedConfig:
        values = require_env_vars((FEED_URL_ENV, FEED_KEY_ENV))
        return cls(base_url=values[FEED_URL_ENV].rstrip("/"), api_key=values[FEED_KEY_ENV])


def price_feed_configured() -> bool:
    return bool(os.getenv(FEED_URL_ENV, "").strip())


def get_price_feed_config() -> PriceFeedConfig:
    return PriceFeedConfig.from_environment()
