"""
Time series loading for historical revenue, grouping raw observations into one ordered value per calendar day and synthesizing a tagged fallback series when too little real history exists.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

import numpy as np

from engine.enums import DataQuality, Platform
from config import settings

if TYPE_CHECKING:
    from datasources.base import RevenueSource
    from store.history import HistoryCache

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevenueObservation:
    date: date
    value: float
    platform: Optional[Platform] = None


@dataclass(frozen=True)
class RevenueSeries:
    points: Tuple[RevenueObservation, ...]
    quality: DataQuality

    @property
    def is_synthetic(self) -> bool:
        return self.quality is DataQuality.synthetic

    @property
    def values(self) -> np.ndarray:
        return np.array([p.value for p in self.points], dtype=float)

    @property
    def dates(self) -> List[date]:
        return [p.date for p in self.points]

    def __len__(self) -> int:
        return len(self.points)


def group_by_date(
    observations: Iterable[RevenueObservation],
    platform: Optional[Platform] = None,
) -> List[RevenueObservation]:
    totals: Dict[date, float] = defaultdict(float)
    for obs in observations:
        if platform is not None and obs.platform != platform:
            continue
        totals[obs.date] += max(0.0, float(obs.value))
    return [
        RevenueObservation(date=d, value=totals[d], platform=platform)
        for d in sorted(totals)
    ]


def synthesize(
    end: date,
    window_days: int,
    rng: Optional[np.random.Generator] = None,
) -> List[RevenueObservation]:
    """Build a plausible daily series of ``window_days + 1`` points ending at ``end``.

    Values are ``base + uniform(0, spread) + amplitude * sin(2*pi*i / period)``,
    so every downstream model gets non-degenerate input.
    """
    rng = rng if rng is not None else np.random.default_rng()
    period = settings.fallback_period_days
    points: List[RevenueObservation] = []
    for i in range(window_days, -1, -1):
        value = (
            settings.fallback_base
            + float(rng.random()) * settings.fallback_spread
            + math.sin(2 * math.pi * i / period) * settings.fallback_amplitude
        )
        points.append(RevenueObservation(date=end - timedelta(days=i), value=value))
    return points


def from_observations(
    observations: Iterable[RevenueObservation],
    *,
    end: date,
    window_days: int,
    platform: Optional[Platform] = None,
    rng: Optional[np.random.Generator] = None,
) -> RevenueSeries:
    grouped = group_by_date(observations, platform=platform)
    if len(grouped) >= settings.min_real_points:
        return RevenueSeries(points=tuple(grouped), quality=DataQuality.real)

    log.warning(
        "only %d real revenue points (need %d); using synthetic fallback series",
        len(grouped), settings.min_real_points,
    )
    return RevenueSeries(
        points=tuple(synthesize(end, window_days, rng=rng)),
        quality=DataQuality.synthetic,
    )


async def fetch_observations(
    source: "RevenueSource",
    user_id: str,
    start: date,
    end: date,
    *,
    platform: Optional[Platform] = None,
    cache: Optional["HistoryCache"] = None,
) -> List[RevenueObservation]:
    """Raw observations in ``[start, end]``, read through ``cache`` when one is given."""
    if cache is not None:
        cached = await cache.get(user_id, platform, start, end)
        if cached is not None:
            return cached
    observations = await source.fetch(user_id, start, end, platform=platform)
    if cache is not None:
        await cache.put(user_id, platform, start, end, observations)
    return observations


async def load(
    source: "RevenueSource",
    user_id: str,
    *,
    window_days: int,
    today: date,
    platform: Optional[Platform] = None,
    cache: Optional["HistoryCache"] = None,
    rng: Optional[np.random.Generator] = None,
) -> RevenueSeries:
    start = today - timedelta(days=window_days)
    observations = await fetch_observations(
        source, user_id, start, today, platform=platform, cache=cache
    )
    return from_observations(
        observations,
        end=today,
        window_days=window_days,
        platform=platform,
        rng=rng,
    )
