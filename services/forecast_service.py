"""
Revenue forecast service orchestrating history loading, the forecasting engine, forecast persistence and reporting for a single user.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import dataclasses
import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from api.requests import (
    AccuracyQuery,
    BreakdownRequest,
    ForecastRequest,
    ReleaseImpactRequest,
    SeasonalityRequest,
    StoredForecastQuery,
)
from api.responses import (
    AccuracyReportOut,
    ForecastPointOut,
    ForecastResponse,
    HighPeriodOut,
    MonthFactor,
    PlatformRevenue,
    ReleaseImpact,
    RevenueBreakdown,
    SeasonalityAnalysis,
    SourceRevenue,
    StoredForecast,
    Trend,
    WeekdayFactor,
    YearRevenueOut,
)
from config import settings
from datasources.base import RevenueSource
from engine.backtest import evaluate
from engine.enums import Granularity, Platform
from engine.forecast import ForecastRun, base_revenue, generate
from engine.release import project
from engine.seasonality import (
    SeasonalityPattern,
    configured_pattern,
    monthly_pattern,
    upcoming_high_periods,
    weekday_pattern,
    year_over_year,
)
from engine.series import RevenueObservation, RevenueSeries, fetch_observations, load
from store.forecasts import ForecastStore
from store.history import HistoryCache

log = logging.getLogger(__name__)


def _platform_growth(
    observations: Sequence[RevenueObservation],
    start: date,
    end: date,
) -> Dict[Optional[Platform], float]:
    # first half gets the extra day of an odd-length window
    midpoint = start + timedelta(days=(end - start).days // 2 + 1)
    halves: Dict[Optional[Platform], List[float]] = defaultdict(lambda: [0.0, 0.0])
    for obs in observations:
        halves[obs.platform][0 if obs.date < midpoint else 1] += obs.value

    growth: Dict[Optional[Platform], float] = {}
    for platform, (first, second) in halves.items():
        growth[platform] = (second - first) / first * 100.0 if first > 0 else 0.0
    return growth


def _platform_breakdown(
    observations: Sequence[RevenueObservation],
    start: date,
    end: date,
) -> List[PlatformRevenue]:
    totals: Dict[Optional[Platform], float] = defaultdict(float)
    for obs in observations:
        totals[obs.platform] += obs.value
    total = sum(totals.values())
    growth = _platform_growth(observations, start, end)

    rows = [
        PlatformRevenue(
            platform=platform,
            revenue=revenue,
            percentage=revenue / total * 100.0 if total > 0 else 0.0,
            growth=growth.get(platform, 0.0),
        )
        for platform, revenue in totals.items()
    ]
    return sorted(rows, key=lambda r: r.revenue, reverse=True)


def _forecast_response(req: ForecastRequest, run: ForecastRun, stored: bool) -> ForecastResponse:
    return ForecastResponse(
        user_id=req.user_id,
        platform=req.platform,
        granularity=run.granularity,
        horizon_days=run.horizon_days,
        data_quality=run.data_quality,
        data_points=run.data_points,
        base_revenue=run.base_revenue,
        volatility=run.volatility,
        momentum=run.momentum,
        trend=Trend.model_validate(run.trend),
        seasonality_version=run.seasonality_version,
        model_version=settings.model_version,
        stored=stored,
        points=[ForecastPointOut.model_validate(p) for p in run.points],
    )


class RevenueForecastService:
    """Entry point for every forecasting operation.

    The observation source, forecast store and optional history cache are
    injected; ``clock`` supplies "today" and ``rng`` seeds the synthetic
    fallback series, so runs are reproducible under test.
    """

    def __init__(
        self,
        source: RevenueSource,
        forecasts: ForecastStore,
        *,
        cache: Optional[HistoryCache] = None,
        pattern: Optional[SeasonalityPattern] = None,
        clock: Optional[Callable[[], date]] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.source = source
        self.forecasts = forecasts
        self.cache = cache
        self.pattern = pattern or configured_pattern()
        self.clock = clock or date.today
        self.rng = rng

    async def _series(
        self,
        user_id: str,
        window_days: int,
        today: date,
        platform: Optional[Platform] = None,
    ) -> RevenueSeries:
        return await load(
            self.source,
            user_id,
            window_days=window_days,
            today=today,
            platform=platform,
            cache=self.cache,
            rng=self.rng,
        )

    async def generate_forecast(self, req: ForecastRequest) -> ForecastResponse:
        today = self.clock()
        series = await self._series(req.user_id, settings.forecast_history_days, today, req.platform)
        run = generate(
            series,
            today=today,
            horizon_days=req.horizon_days,
            granularity=req.granularity,
            pattern=self.pattern,
        )
        log.info(
            "Forecast user=%s horizon=%d granularity=%s points=%d quality=%s",
            req.user_id, run.horizon_days, run.granularity.value, len(run.points), run.data_quality.value,
        )

        stored = False
        try:
            await self.forecasts.save_run(req.user_id, run, req.platform)
            stored = True
        except Exception as exc:
            log.warning("Failed to store forecasts for user %s: %s", req.user_id, exc)

        return _forecast_response(req, run, stored)

    async def get_stored_forecasts(self, query: StoredForecastQuery) -> List[StoredForecast]:
        records = await self.forecasts.list(
            query.user_id,
            platform=query.platform,
            start_date=query.start_date,
            end_date=query.end_date,
            limit=query.limit,
        )
        return [StoredForecast.model_validate(r) for r in records]

    async def get_forecast_accuracy(self, query: AccuracyQuery) -> AccuracyReportOut:
        records = await self.forecasts.reconciled(query.user_id, platform=query.platform)
        report = evaluate(records)
        if report.synthetic:
            log.info("Accuracy for user %s is the cold-start placeholder (%d records)",
                     query.user_id, report.sample_count)
        return AccuracyReportOut.model_validate(report)

    async def project_release_impact(self, req: ReleaseImpactRequest) -> ReleaseImpact:
        series = await self._series(req.user_id, settings.release_history_days, self.clock())
        avg = base_revenue(series.values)
        projection = project(
            avg,
            release_date=req.release_date,
            track_name=req.track_name,
            has_pre_saves=req.has_pre_saves,
            marketing_budget=req.marketing_budget,
            previous_release_performance=req.previous_release_performance,
        )
        return ReleaseImpact(
            **dataclasses.asdict(projection),
            genre=req.genre,
            average_daily_revenue=avg,
            data_quality=series.quality,
        )

    async def get_revenue_breakdown(self, req: BreakdownRequest) -> RevenueBreakdown:
        end = req.end_date or self.clock()
        start = req.start_date or end - timedelta(days=settings.breakdown_window_days)
        observations = await fetch_observations(self.source, req.user_id, start, end, cache=self.cache)
        total = sum(o.value for o in observations)

        short = await self.generate_forecast(ForecastRequest(
            user_id=req.user_id,
            horizon_days=settings.breakdown_short_horizon_days,
            granularity=Granularity.monthly,
        ))
        long = await self.generate_forecast(ForecastRequest(
            user_id=req.user_id,
            horizon_days=settings.breakdown_long_horizon_days,
            granularity=Granularity.monthly,
        ))

        return RevenueBreakdown(
            total=total,
            start_date=start,
            end_date=end,
            by_platform=_platform_breakdown(observations, start, end),
            by_source=[
                SourceRevenue(source=name, revenue=total * share, percentage=share * 100.0)
                for name, share in settings.source_split.items()
            ],
            projected_next_30_days=sum(p.predicted_revenue for p in short.points),
            projected_next_90_days=sum(p.predicted_revenue for p in long.points),
            data_quality=long.data_quality,
        )

    async def get_seasonality_analysis(self, req: SeasonalityRequest) -> SeasonalityAnalysis:
        today = self.clock()
        first_year = today.year - settings.year_over_year_years + 1
        observations = await fetch_observations(
            self.source, req.user_id, date(first_year, 1, 1), today, cache=self.cache
        )
        return SeasonalityAnalysis(
            seasonality_version=self.pattern.version,
            weekday_pattern=[WeekdayFactor(day=d, factor=f) for d, f in weekday_pattern(self.pattern)],
            monthly_pattern=[MonthFactor(month=m, factor=f) for m, f in monthly_pattern(self.pattern)],
            year_over_year=[YearRevenueOut.model_validate(y) for y in year_over_year(observations, today)],
            upcoming_high_periods=[HighPeriodOut.model_validate(p) for p in upcoming_high_periods(today)],
        )

    async def aclose(self) -> None:
        await self.source.aclose()
        if self.cache is not None:
            await self.cache.client.aclose()


def build_service(database_url: Optional[str] = None) -> RevenueForecastService:
    from database import init_database, init_db
    from datasources.data_config import DataSourceSettings
    from datasources.factory import DataSourceFactory
    from store.client import KeyValueClient

    url = database_url or settings.database_url
    if not url:
        raise RuntimeError("REVCAST_DATABASE_URL is not set")
    init_database(url)
    init_db()

    return RevenueForecastService(
        DataSourceFactory.create_revenue_source(DataSourceSettings()),
        ForecastStore(),
        cache=HistoryCache(KeyValueClient()),
        pattern=configured_pattern(),
    )
