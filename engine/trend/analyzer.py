"""
Trend analysis for revenue series, fitting an ordinary least squares line over the series index and classifying its direction, strength and week-over-window change.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from engine.enums import TrendDirection
from config import settings


@dataclass(frozen=True)
class TrendAnalysis:
    direction: TrendDirection
    slope: float
    strength: float
    change_percent: float
    intercept: float = 0.0


STABLE = TrendAnalysis(direction=TrendDirection.stable, slope=0.0, strength=0.0, change_percent=0.0)


def _least_squares(vals: np.ndarray) -> Tuple[float, float]:
    n = len(vals)
    x = np.arange(n, dtype=float)
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(vals))
    sum_xy = float(np.sum(x * vals))
    sum_x2 = float(np.sum(x * x))
    denom = n * sum_x2 - sum_x * sum_x
    if denom == 0:
        return 0.0, sum_y / n
    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def _change_percent(vals: np.ndarray) -> float:
    # windows overlap when fewer than two full windows exist
    window = min(settings.trend_change_window, len(vals))
    first = float(np.mean(vals[:window]))
    last = float(np.mean(vals[-window:]))
    if first == 0:
        return 0.0
    return (last - first) / first * 100.0


def direction_for(slope: float) -> TrendDirection:
    threshold = settings.trend_direction_threshold
    if slope > threshold:
        return TrendDirection.up
    if slope < -threshold:
        return TrendDirection.down
    return TrendDirection.stable


def analyze(vals: Sequence[float]) -> TrendAnalysis:
    arr = np.asarray(vals, dtype=float)
    n = len(arr)
    if n < 2:
        return STABLE

    slope, intercept = _least_squares(arr)
    mean = float(np.mean(arr))
    strength = abs(slope * n) / mean if mean > 0 else 0.0

    return TrendAnalysis(
        direction=direction_for(slope),
        slope=slope,
        strength=min(1.0, max(0.0, strength)),
        change_percent=_change_percent(arr),
        intercept=intercept,
    )


def trend_factor(days_ahead: int, trend: TrendAnalysis) -> float:
    # floored at zero so a steep decline cannot predict negative revenue
    return max(0.0, 1.0 + trend.slope * days_ahead * settings.trend_dampening)
