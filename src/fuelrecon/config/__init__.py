"""Application configuration helpers."""

from __future__ import annotations

from .env import (
    ConfigurationError,
    MissingConfigurationError,
    require_env_var,
    require_env_vars,
)
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .price_feed import PriceFeedConfig, get_price_feed_config, price_feed_configured
from .reconciliation import ReconciliationConfig, get_reconciliation_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_http_cache_path,
    get_storage_config,
)

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "PriceFeedConfig",
    "RateLimit",
    "ReconciliationConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_http_cache_path",
    "get_price_feed_config",
    "get_reconciliation_config",
    "get_storage_config",
    "price_feed_configured",
    "require_env_var",
    "require_env_vars",
]
