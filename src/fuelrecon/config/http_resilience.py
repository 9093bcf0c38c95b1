"""Retry, rate limit and cache settings for the hosted price feed client."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retries apply to idempotent reads only; the feed is never written to."""

    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 10.0
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({429, 500, 502, 503, 504})
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    enabled: bool = True
    # on disk under the data directory; otherwise per-process memory
    persistent: bool = False
    ttl_seconds: float | None = 300.0


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    timeout_seconds: float = 10.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = field(default_factory=CacheConfig)
