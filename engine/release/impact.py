"""
Release impact projection modelling a single release as a linear ramp to a peak day followed by geometric daily decay, summed over a fixed window into a lifetime value.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from config import settings


@dataclass(frozen=True)
class ReleaseImpactProjection:
    release_date: date
    track_name: str
    projected_streams: int
    projected_revenue: float
    peak_day: int
    peak_revenue: float
    decay_rate: float
    lifetime_value: float
    daily_curve: List[float] = field(default_factory=list)


def marketing_boost(budget: Optional[float]) -> float:
    if not budget or budget <= 0:
        return 1.0
    return 1.0 + math.log10(budget) * settings.release_marketing_scale


def previous_performance_factor(previous: Optional[float], avg_daily_revenue: float) -> float:
    if not previous or avg_daily_revenue <= 0:
        return 1.0
    return previous / avg_daily_revenue


def peak_revenue(
    avg_daily_revenue: float,
    *,
    has_pre_saves: bool = False,
    marketing_budget: Optional[float] = None,
    previous_release_performance: Optional[float] = None,
) -> float:
    pre_save = settings.release_presave_boost if has_pre_saves else 1.0
    return (
        avg_daily_revenue
        * settings.release_base_multiplier
        * pre_save
        * marketing_boost(marketing_budget)
        * previous_performance_factor(previous_release_performance, avg_daily_revenue)
    )


def decay_curve(
    peak: float,
    peak_day: int | None = None,
    decay_rate: float | None = None,
    window_days: int | None = None,
) -> List[float]:
    if peak_day is None:
        peak_day = settings.release_peak_day
    if decay_rate is None:
        decay_rate = settings.release_decay_rate
    if window_days is None:
        window_days = settings.release_window_days

    curve: List[float] = []
    for day in range(window_days):
        if day < peak_day:
            curve.append(peak * day / peak_day)
        else:
            curve.append(peak * decay_rate ** (day - peak_day))
    return curve


def project(
    avg_daily_revenue: float,
    *,
    release_date: date,
    track_name: str,
    has_pre_saves: bool = False,
    marketing_budget: Optional[float] = None,
    previous_release_performance: Optional[float] = None,
) -> ReleaseImpactProjection:
    peak = peak_revenue(
        avg_daily_revenue,
        has_pre_saves=has_pre_saves,
        marketing_budget=marketing_budget,
        previous_release_performance=previous_release_performance,
    )
    curve = decay_curve(peak)
    lifetime = sum(curve)

    return ReleaseImpactProjection(
        release_date=release_date,
        track_name=track_name,
        projected_streams=math.floor(lifetime / settings.revenue_per_stream),
        projected_revenue=lifetime,
        peak_day=settings.release_peak_day,
        peak_revenue=peak,
        decay_rate=settings.release_decay_rate,
        lifetime_value=lifetime,
        daily_curve=curve,
    )
