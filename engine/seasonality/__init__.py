"""
Seasonality multipliers and calendar reporting.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.seasonality.model import (
    DEFAULT_PATTERN,
    Holiday,
    SeasonalityPattern,
    configured_pattern,
    factor_for,
    load_pattern,
)
from engine.seasonality.reporter import (
    HighPeriod,
    YearRevenue,
    monthly_pattern,
    upcoming_high_periods,
    weekday_pattern,
    year_over_year,
)

__all__ = [
    "DEFAULT_PATTERN", "Holiday", "SeasonalityPattern", "configured_pattern",
    "factor_for", "load_pattern", "HighPeriod", "YearRevenue", "monthly_pattern",
    "upcoming_high_periods", "weekday_pattern", "year_over_year",
]
