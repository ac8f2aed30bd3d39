"""
Forecast generation combining trend, seasonality and momentum into point predictions with confidence intervals and scenario bands.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""


from engine.forecast.generator import (
    ConfidenceInterval,
    ForecastFactors,
    ForecastPoint,
    ForecastRun,
    Scenario,
    base_revenue,
    confidence_level,
    generate,
    volatility,
)

__all__ = [
    "ConfidenceInterval", "ForecastFactors", "ForecastPoint", "ForecastRun",
    "Scenario", "base_revenue", "confidence_level", "generate", "volatility",
]
