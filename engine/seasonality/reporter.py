"""
Seasonality reporting: display tables for the weekday and monthly multipliers, the next occurrence of each configured high-revenue calendar window, and measured year-over-year revenue.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from engine.seasonality.model import DEFAULT_PATTERN, SeasonalityPattern
from engine.series.loader import RevenueObservation
from config import settings

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_LABELS = tuple(calendar.month_abbr[1:])


@dataclass(frozen=True)
class HighPeriod:
    name: str
    start: date
    end: date
    expected_boost: float


@dataclass(frozen=True)
class YearRevenue:
    year: int
    revenue: float
    growth: float


def weekday_pattern(pattern: SeasonalityPattern = DEFAULT_PATTERN) -> List[Tuple[str, float]]:
    return list(zip(WEEKDAY_LABELS, pattern.day_of_week))


def monthly_pattern(pattern: SeasonalityPattern = DEFAULT_PATTERN) -> List[Tuple[str, float]]:
    return list(zip(MONTH_LABELS, pattern.month_of_year))


def _clamp_day(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def upcoming_high_periods(
    today: date,
    periods: Optional[Sequence[Tuple[str, int, int, int, float]]] = None,
) -> List[HighPeriod]:
    periods = periods if periods is not None else settings.high_periods
    result: List[HighPeriod] = []
    for name, month, start_day, end_day, boost in periods:
        year = today.year
        end = _clamp_day(year, month, end_day)
        if end < today:
            year += 1
            end = _clamp_day(year, month, end_day)
        result.append(HighPeriod(
            name=name,
            start=_clamp_day(year, month, start_day),
            end=end,
            expected_boost=boost,
        ))
    return sorted(result, key=lambda p: p.start)


def year_over_year(
    observations: Iterable[RevenueObservation],
    today: date,
    years: Optional[int] = None,
) -> List[YearRevenue]:
    years = years if years is not None else settings.year_over_year_years
    totals: Dict[int, float] = defaultdict(float)
    for obs in observations:
        totals[obs.date.year] += obs.value

    result: List[YearRevenue] = []
    previous: Optional[float] = None
    for year in range(today.year - years + 1, today.year + 1):
        revenue = totals.get(year, 0.0)
        growth = (revenue - previous) / previous * 100.0 if previous else 0.0
        result.append(YearRevenue(year=year, revenue=round(revenue, 2), growth=round(growth, 2)))
        previous = revenue
    return result
