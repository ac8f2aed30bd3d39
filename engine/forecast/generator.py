"""
Forecast generation combining base revenue with trend, seasonality and momentum factors into one point prediction per target date, bounded by a confidence interval that widens with volatility and horizon, and bracketed by a best/expected/worst scenario band.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Sequence

import numpy as np

from engine.enums import DataQuality, Granularity, TrendDirection
from engine.momentum import estimate as estimate_momentum, momentum_factor
from engine.seasonality.model import DEFAULT_PATTERN, SeasonalityPattern, factor_for
from engine.series.loader import RevenueSeries
from engine.trend import TrendAnalysis, analyze as analyze_trend, trend_factor
from config import settings


@dataclass(frozen=True)
class ConfidenceInterval:
    level: float
    low: float
    high: float


@dataclass(frozen=True)
class Scenario:
    best: float
    expected: float
    worst: float


@dataclass(frozen=True)
class ForecastFactors:
    trend: float
    seasonality: float
    momentum: float


@dataclass(frozen=True)
class ForecastPoint:
    target_date: date
    days_ahead: int
    predicted_revenue: float
    predicted_streams: int
    predicted_listeners: int
    confidence: ConfidenceInterval
    scenario: Scenario
    factors: ForecastFactors
    data_quality: DataQuality


@dataclass(frozen=True)
class ForecastRun:
    points: List[ForecastPoint]
    trend: TrendAnalysis
    momentum: float
    base_revenue: float
    volatility: float
    data_points: int
    data_quality: DataQuality
    granularity: Granularity
    horizon_days: int
    seasonality_version: str

    def model_inputs(self) -> Dict[str, Any]:
        return {
            "base_revenue": self.base_revenue,
            "volatility": self.volatility,
            "momentum": self.momentum,
            "trend": {
                "direction": self.trend.direction.value,
                "slope": self.trend.slope,
                "strength": self.trend.strength,
                "change_percent": self.trend.change_percent,
            },
            "data_points": self.data_points,
            "data_quality": self.data_quality.value,
            "granularity": self.granularity.value,
            "horizon_days": self.horizon_days,
            "seasonality_version": self.seasonality_version,
        }


def base_window(vals: Sequence[float]) -> np.ndarray:
    return np.asarray(vals, dtype=float)[-settings.base_window:]


def base_revenue(vals: Sequence[float]) -> float:
    window = base_window(vals)
    if len(window) == 0:
        return settings.default_base_revenue
    return float(np.mean(window))


def volatility(window: Sequence[float]) -> float:
    """Coefficient of variation of ``window``; never negative."""
    arr = np.asarray(window, dtype=float)
    if len(arr) < 2:
        return settings.default_volatility
    mean = float(np.mean(arr))
    if mean <= 0:
        return 0.0
    return float(np.std(arr)) / mean


def confidence_level(days_ahead: int, data_points: int) -> float:
    data_bonus = min(settings.confidence_data_bonus_cap, data_points / settings.confidence_data_divisor)
    decayed = (settings.confidence_base + data_bonus) * settings.confidence_daily_decay ** days_ahead
    return max(settings.confidence_floor, min(settings.confidence_cap, decayed))


def confidence_interval(predicted: float, vol: float, level: float) -> ConfidenceInterval:
    spread = predicted * vol * (1.0 - level)
    return ConfidenceInterval(
        level=level,
        low=max(0.0, predicted - spread),
        high=predicted + spread,
    )


def scenarios(predicted: float, vol: float, trend: TrendAnalysis) -> Scenario:
    bonus = settings.scenario_trend_bonus
    best = 1.0 + vol + (bonus if trend.direction is TrendDirection.up else 0.0)
    worst = 1.0 - vol - (bonus if trend.direction is TrendDirection.down else 0.0)
    return Scenario(
        best=predicted * best,
        expected=predicted,
        worst=predicted * max(settings.scenario_worst_floor, worst),
    )


def steps(horizon_days: int, granularity: Granularity) -> List[int]:
    step = granularity.step_days
    return list(range(step, horizon_days + 1, step))


def generate(
    series: RevenueSeries,
    *,
    today: date,
    horizon_days: int | None = None,
    granularity: Granularity = Granularity.daily,
    pattern: SeasonalityPattern = DEFAULT_PATTERN,
) -> ForecastRun:
    if horizon_days is None:
        horizon_days = settings.default_horizon_days
    vals = series.values
    trend = analyze_trend(vals)
    momentum = estimate_momentum(vals)
    base = base_revenue(vals)
    vol = volatility(base_window(vals))
    n = len(vals)

    points: List[ForecastPoint] = []
    for days_ahead in steps(horizon_days, granularity):
        target = today + timedelta(days=days_ahead)
        factors = ForecastFactors(
            trend=trend_factor(days_ahead, trend),
            seasonality=factor_for(target, pattern),
            momentum=momentum_factor(days_ahead, momentum),
        )
        predicted = base * factors.trend * factors.seasonality * factors.momentum
        streams = math.floor(predicted / settings.revenue_per_stream)
        points.append(ForecastPoint(
            target_date=target,
            days_ahead=days_ahead,
            predicted_revenue=predicted,
            predicted_streams=streams,
            predicted_listeners=math.floor(streams * settings.listener_ratio),
            confidence=confidence_interval(predicted, vol, confidence_level(days_ahead, n)),
            scenario=scenarios(predicted, vol, trend),
            factors=factors,
            data_quality=series.quality,
        ))

    return ForecastRun(
        points=points,
        trend=trend,
        momentum=momentum,
        base_revenue=base,
        volatility=vol,
        data_points=n,
        data_quality=series.quality,
        granularity=granularity,
        horizon_days=horizon_days,
        seasonality_version=pattern.version,
    )
