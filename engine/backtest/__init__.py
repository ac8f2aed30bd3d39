"""
Accuracy scoring of stored forecasts against observed revenue.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.backtest.accuracy import (
    AccuracyReport,
    AccuracyTrend,
    PeriodAccuracy,
    ReconciledForecast,
    accuracy_trend,
    cold_start,
    evaluate,
)

__all__ = [
    "AccuracyReport", "AccuracyTrend", "PeriodAccuracy", "ReconciledForecast",
    "accuracy_trend", "cold_start", "evaluate",
]
