"""
Backtesting of stored forecasts against reconciled actuals, scoring MAPE, RMSE and per-period accuracy, and comparing the most recent predictions with older ones to tell whether the model is getting better.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from engine.enums import AccuracyTrendLabel
from config import settings


@dataclass(frozen=True)
class ReconciledForecast:
    target_date: date
    predicted: float
    actual: float


@dataclass(frozen=True)
class PeriodAccuracy:
    period: date
    predicted: float
    actual: float
    accuracy: float


@dataclass(frozen=True)
class AccuracyTrend:
    improving: bool
    change_percent: float
    label: AccuracyTrendLabel


@dataclass(frozen=True)
class AccuracyReport:
    overall_accuracy: float
    mape: float
    rmse: float
    trend: AccuracyTrend
    by_period: List[PeriodAccuracy] = field(default_factory=list)
    sample_count: int = 0
    # True when mape/accuracy are the cold-start placeholder rather than measured
    synthetic: bool = False


def cold_start(rmse: float = 0.0, sample_count: int = 0) -> AccuracyReport:
    return AccuracyReport(
        overall_accuracy=settings.cold_start_accuracy,
        mape=settings.cold_start_mape,
        rmse=rmse,
        trend=AccuracyTrend(
            improving=True,
            change_percent=settings.cold_start_trend_change,
            label=AccuracyTrendLabel.stable,
        ),
        by_period=[],
        sample_count=sample_count,
        synthetic=True,
    )


def _mean(vals: List[float]) -> Optional[float]:
    return sum(vals) / len(vals) if vals else None


def accuracy_trend(accuracies: List[float], recent_window: int | None = None) -> AccuracyTrend:
    if recent_window is None:
        recent_window = settings.accuracy_recent_window
    recent = _mean(accuracies[-recent_window:]) or 0.0
    older = _mean(accuracies[:-recent_window])
    if older is None:
        return AccuracyTrend(improving=False, change_percent=0.0, label=AccuracyTrendLabel.stable)

    change = (recent - older) / older * 100.0 if older > 0 else 0.0
    band = settings.accuracy_trend_band
    if recent > older + band:
        label = AccuracyTrendLabel.improving
    elif recent < older - band:
        label = AccuracyTrendLabel.declining
    else:
        label = AccuracyTrendLabel.stable
    return AccuracyTrend(improving=recent > older, change_percent=change, label=label)


def evaluate(records: Iterable[ReconciledForecast]) -> AccuracyReport:
    ordered = sorted(records, key=lambda r: r.target_date)
    if not ordered:
        return cold_start()

    squared = [(r.predicted - r.actual) ** 2 for r in ordered]
    rmse = math.sqrt(sum(squared) / len(squared))

    # zero actuals have no defined percentage error; they only count toward RMSE
    scorable = [r for r in ordered if r.actual > 0]
    if not scorable:
        return cold_start(rmse=rmse, sample_count=len(ordered))

    errors: List[float] = []
    by_period: List[PeriodAccuracy] = []
    for r in scorable:
        error = abs(r.predicted - r.actual) / r.actual
        errors.append(error)
        by_period.append(PeriodAccuracy(
            period=r.target_date,
            predicted=r.predicted,
            actual=r.actual,
            accuracy=max(0.0, (1.0 - error) * 100.0),
        ))

    mape = sum(errors) / len(errors) * 100.0
    return AccuracyReport(
        overall_accuracy=max(0.0, 100.0 - mape),
        mape=mape,
        rmse=rmse,
        trend=accuracy_trend([p.accuracy for p in by_period]),
        by_period=by_period,
        sample_count=len(ordered),
    )
