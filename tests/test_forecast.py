"""
Test Suite for Forecast Generation

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import math
from datetime import timedelta

import numpy as np
import pytest

from conftest import TODAY, daily
from engine.enums import DataQuality, Granularity, TrendDirection
from engine.forecast import confidence_level, generate, volatility
from engine.forecast.generator import confidence_interval, scenarios, steps
from engine.seasonality import factor_for
from engine.series import from_observations
from engine.trend import TrendAnalysis


def _series(values):
    return from_observations(daily(values), end=TODAY, window_days=180)


def test_flat_history_collapses_interval_to_point():
    run = generate(_series([100.0] * 30), today=TODAY, horizon_days=1)
    assert len(run.points) == 1
    p = run.points[0]
    assert p.target_date == TODAY + timedelta(days=1)
    assert p.factors.trend == 1.0
    assert p.factors.momentum == 1.0
    assert p.factors.seasonality == factor_for(p.target_date)
    assert p.predicted_revenue == pytest.approx(100.0 * p.factors.trend * p.factors.seasonality)
    assert p.confidence.low == p.confidence.high == p.predicted_revenue
    assert run.volatility == 0.0


def test_streams_and_listeners_derive_from_revenue():
    p = generate(_series([100.0] * 30), today=TODAY, horizon_days=1).points[0]
    assert p.predicted_streams == math.floor(p.predicted_revenue / 0.004)
    assert p.predicted_listeners == math.floor(p.predicted_streams * 0.6)


def test_confidence_decays_monotonically():
    for data_points in (0, 30, 180, 1000):
        levels = [confidence_level(d, data_points) for d in range(0, 400)]
        assert all(b <= a for a, b in zip(levels, levels[1:]))
        assert all(0.3 <= lv <= 0.95 for lv in levels)


def test_confidence_level_formula():
    assert confidence_level(0, 50) == pytest.approx(0.8)
    assert confidence_level(10, 50) == pytest.approx(0.8 * 0.99 ** 10)
    assert confidence_level(0, 10_000) == pytest.approx(0.9)
    assert confidence_level(1000, 10_000) == 0.3


@pytest.mark.parametrize("vol", [0.0, 0.05, 0.4, 0.9, 3.0])
@pytest.mark.parametrize("direction", list(TrendDirection))
def test_scenario_ordering(vol, direction):
    trend = TrendAnalysis(direction=direction, slope=0.0, strength=0.0, change_percent=0.0)
    s = scenarios(80.0, vol, trend)
    assert s.worst <= s.expected <= s.best
    assert s.worst >= 80.0 * 0.5


def test_scenario_trend_bonus():
    up = TrendAnalysis(direction=TrendDirection.up, slope=1.0, strength=0.1, change_percent=0.0)
    down = TrendAnalysis(direction=TrendDirection.down, slope=-1.0, strength=0.1, change_percent=0.0)
    assert scenarios(100.0, 0.2, up).best == pytest.approx(130.0)
    assert scenarios(100.0, 0.2, down).worst == pytest.approx(70.0)


def test_low_bound_is_clamped_at_zero():
    ci = confidence_interval(10.0, 5.0, 0.3)
    assert ci.low == 0.0
    assert ci.high == pytest.approx(10.0 + 10.0 * 5.0 * 0.7)


def test_volatility_guards():
    assert volatility([]) == 0.2
    assert volatility([5.0]) == 0.2
    assert volatility([0.0, 0.0, 0.0]) == 0.0
    assert volatility([90.0, 110.0]) == pytest.approx(10.0 / 100.0)


def test_base_revenue_uses_trailing_thirty_days():
    run = generate(_series([1000.0] * 10 + [50.0] * 30), today=TODAY, horizon_days=1)
    assert run.base_revenue == pytest.approx(50.0)


@pytest.mark.parametrize("granularity,horizon,expected", [
    (Granularity.daily, 90, 90),
    (Granularity.weekly, 90, 12),
    (Granularity.monthly, 90, 3),
    (Granularity.monthly, 30, 1),
    (Granularity.weekly, 3, 0),
])
def test_step_counts(granularity, horizon, expected):
    assert len(steps(horizon, granularity)) == expected


def test_zero_history_forecast_uses_synthetic_series():
    series = from_observations([], end=TODAY, window_days=180, rng=np.random.default_rng(3))
    assert series.quality == DataQuality.synthetic
    assert len(series) == 181
    run = generate(series, today=TODAY, horizon_days=90, granularity=Granularity.weekly)
    assert len(run.points) == 90 // 7
    assert run.data_quality == DataQuality.synthetic
    assert all(p.data_quality == DataQuality.synthetic for p in run.points)
    assert all(p.predicted_revenue > 0 for p in run.points)


def test_steep_decline_never_predicts_negative_revenue():
    run = generate(_series([500.0 - 15.0 * i for i in range(30)]), today=TODAY, horizon_days=365)
    assert all(p.predicted_revenue >= 0.0 for p in run.points)
    assert all(p.confidence.low >= 0.0 for p in run.points)
    assert all(p.scenario.worst <= p.scenario.expected <= p.scenario.best for p in run.points)


def test_model_inputs_capture_reproducibility_data():
    run = generate(_series([100.0 + i for i in range(40)]), today=TODAY, horizon_days=7)
    inputs = run.model_inputs()
    assert inputs["data_points"] == 40
    assert inputs["data_quality"] == "real"
    assert inputs["trend"]["direction"] == "up"
    assert inputs["seasonality_version"] == "2.0.0"
    assert inputs["granularity"] == "daily"
