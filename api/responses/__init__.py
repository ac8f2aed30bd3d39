"""
Response models for the forecasting operations, built from engine results.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_serializer

from engine.enums import AccuracyTrendLabel, DataQuality, Granularity, Platform, TrendDirection


def _coerce(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _coerce(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_coerce(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return obj


class NpModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        return _coerce(handler(self))


class Confidence(NpModel):
    level: float = Field(ge=0.0, le=1.0)
    low: float
    high: float


class ScenarioBand(NpModel):
    best: float
    expected: float
    worst: float


class Factors(NpModel):
    trend: float
    seasonality: float
    momentum: float


class ForecastPointOut(NpModel):
    target_date: date
    days_ahead: int
    predicted_revenue: float
    predicted_streams: int
    predicted_listeners: int
    confidence: Confidence
    scenario: ScenarioBand
    factors: Factors
    data_quality: DataQuality


class Trend(NpModel):
    direction: TrendDirection
    slope: float
    strength: float = Field(ge=0.0, le=1.0)
    change_percent: float


class ForecastResponse(NpModel):
    user_id: str
    platform: Optional[Platform] = None
    granularity: Granularity
    horizon_days: int
    data_quality: DataQuality
    data_points: int
    base_revenue: float
    volatility: float
    momentum: float
    trend: Trend
    seasonality_version: str
    model_version: str
    stored: bool = False
    points: List[ForecastPointOut] = Field(default_factory=list)


class StoredForecast(NpModel):
    id: str
    forecast_date: datetime
    target_period_start: date
    target_period_end: date
    platform: Optional[Platform] = None
    granularity: Granularity
    point: ForecastPointOut
    model_version: str
    model_inputs: Dict[str, Any] = Field(default_factory=dict)
    actual_revenue: Optional[float] = None
    reconciled_at: Optional[datetime] = None


class PeriodAccuracyOut(NpModel):
    period: date
    predicted: float
    actual: float
    accuracy: float


class AccuracyTrendOut(NpModel):
    improving: bool
    change_percent: float
    label: AccuracyTrendLabel


class AccuracyReportOut(NpModel):
    overall_accuracy: float
    mape: float
    rmse: float
    trend: AccuracyTrendOut
    by_period: List[PeriodAccuracyOut] = Field(default_factory=list)
    sample_count: int = 0
    synthetic: bool = False


class ReleaseImpact(NpModel):
    release_date: date
    track_name: str
    genre: Optional[str] = None
    projected_streams: int
    projected_revenue: float
    peak_day: int
    peak_revenue: float
    decay_rate: float
    lifetime_value: float
    average_daily_revenue: float
    data_quality: DataQuality
    daily_curve: List[float] = Field(default_factory=list)


class PlatformRevenue(NpModel):
    platform: Optional[Platform] = None
    revenue: float
    percentage: float
    growth: float


class SourceRevenue(NpModel):
    source: str
    revenue: float
    percentage: float


class RevenueBreakdown(NpModel):
    total: float
    start_date: date
    end_date: date
    by_platform: List[PlatformRevenue] = Field(default_factory=list)
    by_source: List[SourceRevenue] = Field(default_factory=list)
    projected_next_30_days: float
    projected_next_90_days: float
    data_quality: DataQuality


class WeekdayFactor(NpModel):
    day: str
    factor: float


class MonthFactor(NpModel):
    month: str
    factor: float


class YearRevenueOut(NpModel):
    year: int
    revenue: float
    growth: float


class HighPeriodOut(NpModel):
    name: str
    start: date
    end: date
    expected_boost: float


class SeasonalityAnalysis(NpModel):
    seasonality_version: str
    weekday_pattern: List[WeekdayFactor] = Field(default_factory=list)
    monthly_pattern: List[MonthFactor] = Field(default_factory=list)
    year_over_year: List[YearRevenueOut] = Field(default_factory=list)
    upcoming_high_periods: List[HighPeriodOut] = Field(default_factory=list)
