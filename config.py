"""
Constants and configuration for the revenue forecasting engine.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import Dict, List, Optional, Tuple

from pydantic_settings import BaseSettings


REDIS_URL: str = os.getenv("REVCAST_REDIS_URL", "redis://localhost:6379/0")
HISTORY_CACHE_TTL: int = int(os.getenv("REVCAST_HISTORY_CACHE_TTL", "900"))

OBSERVATION_BACKEND_SQL = "sql"
OBSERVATION_BACKEND_HTTP = "http"

REVCAST_DATABASE_URL = os.getenv("REVCAST_DATABASE_URL", "")
REVCAST_OBSERVATION_BACKEND = os.getenv("REVCAST_OBSERVATION_BACKEND", OBSERVATION_BACKEND_SQL).lower()
REVCAST_OBSERVATION_HTTP_URL = os.getenv("REVCAST_OBSERVATION_HTTP_URL", "http://revenue-ingest:8080").rstrip("/")
REVCAST_CONNECTOR_TIMEOUT = int(os.getenv("REVCAST_CONNECTOR_TIMEOUT", "30"))
REVCAST_SEASONALITY_TABLE_PATH = os.getenv("REVCAST_SEASONALITY_TABLE_PATH", "")

# identifies the generation logic stamped on every stored forecast
MODEL_VERSION = "2.0.0"

# revenue split reported by the breakdown; the observation store has no source dimension
SOURCE_SPLIT: Dict[str, float] = {
    "Streaming": 0.75,
    "Playlists": 0.15,
    "Radio": 0.05,
    "Other": 0.05,
}

# (name, month, start_day, end_day, expected_boost)
HIGH_PERIODS: List[Tuple[str, int, int, int, float]] = [
    ("year-end", 12, 20, 31, 1.4),
    ("new-year", 1, 1, 7, 1.2),
    ("mid-year", 6, 15, 30, 1.15),
]


class Settings(BaseSettings):
    database_url: str = REVCAST_DATABASE_URL
    redis_url: str = REDIS_URL
    history_cache_ttl: int = HISTORY_CACHE_TTL

    observation_backend: str = REVCAST_OBSERVATION_BACKEND
    observation_http_url: str = REVCAST_OBSERVATION_HTTP_URL
    connector_timeout: int = REVCAST_CONNECTOR_TIMEOUT
    connector_retry_attempts: int = 3
    connector_retry_delay: float = 0.5

    seasonality_table_path: Optional[str] = REVCAST_SEASONALITY_TABLE_PATH or None

    model_version: str = MODEL_VERSION

    # unit conversions applied to predicted revenue
    revenue_per_stream: float = 0.004
    listener_ratio: float = 0.6

    # history windows (days) fetched from the observation store
    forecast_history_days: int = 180
    release_history_days: int = 365

    # synthetic fallback series
    min_real_points: int = 7
    fallback_base: float = 50.0
    fallback_spread: float = 100.0
    fallback_amplitude: float = 20.0
    fallback_period_days: float = 7.0

    # trend analysis
    trend_direction_threshold: float = 0.1
    trend_change_window: int = 7
    trend_dampening: float = 0.01

    # momentum
    momentum_window: int = 7
    momentum_decay: float = 0.95
    momentum_decay_period_days: float = 30.0

    # forecast generation
    default_horizon_days: int = 90
    max_horizon_days: int = 730
    base_window: int = 30
    default_base_revenue: float = 100.0
    default_volatility: float = 0.2
    confidence_base: float = 0.7
    confidence_data_bonus_cap: float = 0.2
    confidence_data_divisor: float = 500.0
    confidence_daily_decay: float = 0.99
    confidence_floor: float = 0.3
    confidence_cap: float = 0.95
    scenario_trend_bonus: float = 0.1
    scenario_worst_floor: float = 0.5

    # backtesting
    stored_forecast_limit: int = 100
    accuracy_record_limit: int = 52
    accuracy_recent_window: int = 12
    accuracy_trend_band: float = 5.0
    cold_start_accuracy: float = 85.0
    cold_start_mape: float = 15.0
    cold_start_trend_change: float = 5.0

    # release impact projection
    release_base_multiplier: float = 3.0
    release_presave_boost: float = 1.5
    release_marketing_scale: float = 0.1
    release_peak_day: int = 3
    release_decay_rate: float = 0.85
    release_window_days: int = 90

    # breakdown and seasonality reporting
    breakdown_short_horizon_days: int = 30
    breakdown_long_horizon_days: int = 90
    breakdown_window_days: int = 365
    source_split: Dict[str, float] = SOURCE_SPLIT
    high_periods: List[Tuple[str, int, int, int, float]] = HIGH_PERIODS
    year_over_year_years: int = 3

    # key/value store
    store_redis_retry_cooldown_seconds: float = 10.0
    store_redis_op_timeout_seconds: float = 0.5
    store_fallback_max_items: int = 10_000

    model_config = {
        "env_prefix": "REVCAST_",
        "extra": "ignore",
    }


settings = Settings()
