"""
Test Suite for the Revenue Forecast Service

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import asyncio
import json
import logging
from datetime import date, timedelta

import pytest

from api.requests import (
    AccuracyQuery,
    BreakdownRequest,
    ForecastRequest,
    ReleaseImpactRequest,
    SeasonalityRequest,
    StoredForecastQuery,
)
from conftest import TODAY, daily
from engine.enums import DataQuality, Granularity, Platform
from engine.seasonality import factor_for


@pytest.mark.asyncio
async def test_flat_history_forecast(service, source):
    source.add("u1", daily([100.0] * 30))
    resp = await service.generate_forecast(ForecastRequest(user_id="u1", horizon_days=1))

    assert resp.data_quality == DataQuality.real
    assert resp.stored is True
    assert resp.model_version == "2.0.0"
    (point,) = resp.points
    assert point.factors.momentum == 1.0
    assert point.predicted_revenue == pytest.approx(100.0 * point.factors.trend * factor_for(point.target_date))
    assert point.confidence.low == point.confidence.high == point.predicted_revenue


@pytest.mark.asyncio
async def test_zero_history_forecast_is_flagged_synthetic(service):
    resp = await service.generate_forecast(
        ForecastRequest(user_id="new-user", horizon_days=90, granularity=Granularity.weekly)
    )
    assert len(resp.points) == 12
    assert resp.data_quality == DataQuality.synthetic
    assert all(p.data_quality == DataQuality.synthetic for p in resp.points)


@pytest.mark.asyncio
async def test_platform_filter_only_uses_that_platform(service, source):
    source.add("u1", daily([100.0] * 30, platform=Platform.spotify))
    source.add("u1", daily([900.0] * 30, platform=Platform.apple))
    resp = await service.generate_forecast(
        ForecastRequest(user_id="u1", horizon_days=1, platform=Platform.spotify)
    )
    assert resp.base_revenue == pytest.approx(100.0)
    assert resp.platform == Platform.spotify


@pytest.mark.asyncio
async def test_forecasts_are_persisted_and_listed(service, source):
    source.add("u1", daily([50.0] * 30))
    await service.generate_forecast(ForecastRequest(user_id="u1", horizon_days=7))

    stored = await service.get_stored_forecasts(StoredForecastQuery(user_id="u1"))
    assert len(stored) == 7
    assert {s.model_version for s in stored} == {"2.0.0"}
    assert all(s.actual_revenue is None for s in stored)

    windowed = await service.get_stored_forecasts(StoredForecastQuery(
        user_id="u1",
        start_date=TODAY + timedelta(days=1),
        end_date=TODAY + timedelta(days=3),
    ))
    assert len(windowed) == 3


@pytest.mark.asyncio
async def test_persistence_failure_is_not_fatal(service, source, caplog, monkeypatch):
    source.add("u1", daily([50.0] * 30))

    async def broken(*args, **kwargs):
        raise RuntimeError("database is gone")

    monkeypatch.setattr(service.forecasts, "save_run", broken)
    with caplog.at_level(logging.WARNING, logger="services.forecast_service"):
        resp = await service.generate_forecast(ForecastRequest(user_id="u1", horizon_days=3))

    assert len(resp.points) == 3
    assert resp.stored is False
    assert "database is gone" in caplog.text


@pytest.mark.asyncio
async def test_accuracy_cold_start(service):
    report = await service.get_forecast_accuracy(AccuracyQuery(user_id="u1"))
    assert report.overall_accuracy == 85
    assert report.mape == 15
    assert report.by_period == []
    assert report.synthetic is True


@pytest.mark.asyncio
async def test_accuracy_after_reconciliation(service, source, forecast_store):
    source.add("u1", daily([100.0] * 30))
    await service.generate_forecast(ForecastRequest(user_id="u1", horizon_days=3))
    for record in await forecast_store.list("u1"):
        await forecast_store.attach_actual(record.id, record.point.predicted_revenue * 1.1)

    report = await service.get_forecast_accuracy(AccuracyQuery(user_id="u1"))
    assert report.synthetic is False
    assert report.sample_count == 3
    assert report.mape == pytest.approx(100.0 * (1 - 1 / 1.1))
    assert len(report.by_period) == 3


@pytest.mark.asyncio
async def test_release_projection_scales_from_recent_revenue(service, source):
    # a year at 5.0 with the last 30 days at 20.0
    source.add("u1", daily([5.0] * 335 + [20.0] * 30))
    resp = await service.project_release_impact(ReleaseImpactRequest(
        user_id="u1",
        release_date=date(2026, 4, 1),
        track_name="Single",
        genre="pop",
        has_pre_saves=True,
    ))
    assert resp.average_daily_revenue == pytest.approx(20.0)
    assert resp.peak_revenue == pytest.approx(20.0 * 3 * 1.5)
    assert resp.genre == "pop"
    assert len(resp.daily_curve) == 90
    assert resp.peak_revenue * 3 / 2 < resp.lifetime_value < resp.peak_revenue * 90


@pytest.mark.asyncio
async def test_revenue_breakdown(service, source):
    end = TODAY
    start = end - timedelta(days=59)
    # spotify doubles from the first half of the window to the second
    source.add("u1", daily([10.0] * 30 + [20.0] * 30, end=end, platform=Platform.spotify))
    source.add("u1", daily([5.0] * 60, end=end, platform=Platform.apple))

    resp = await service.get_revenue_breakdown(BreakdownRequest(user_id="u1", start_date=start, end_date=end))

    assert resp.total == pytest.approx(900.0 + 300.0)
    spotify, apple = resp.by_platform
    assert spotify.platform == Platform.spotify
    assert spotify.revenue == pytest.approx(900.0)
    assert spotify.percentage == pytest.approx(75.0)
    assert spotify.growth == pytest.approx(100.0)
    assert apple.growth == pytest.approx(0.0)
    assert [(s.source, s.percentage) for s in resp.by_source] == [
        ("Streaming", 75.0), ("Playlists", 15.0), ("Radio", 5.0), ("Other", 5.0),
    ]
    assert sum(s.revenue for s in resp.by_source) == pytest.approx(resp.total)
    assert resp.projected_next_30_days > 0
    assert resp.projected_next_90_days > resp.projected_next_30_days


@pytest.mark.asyncio
async def test_breakdown_without_revenue(service):
    resp = await service.get_revenue_breakdown(BreakdownRequest(user_id="nobody"))
    assert resp.total == 0.0
    assert resp.by_platform == []
    assert resp.end_date == TODAY
    assert resp.data_quality == DataQuality.synthetic


@pytest.mark.asyncio
async def test_seasonality_analysis(service, source):
    source.add("u1", [
        *daily([10.0] * 10, end=date(2024, 6, 30)),
        *daily([15.0] * 10, end=date(2025, 6, 30)),
        *daily([30.0] * 10, end=date(2026, 2, 28)),
    ])
    resp = await service.get_seasonality_analysis(SeasonalityRequest(user_id="u1"))

    assert [w.day for w in resp.weekday_pattern][0] == "Mon"
    assert len(resp.monthly_pattern) == 12
    assert [(y.year, y.revenue) for y in resp.year_over_year] == [(2024, 100.0), (2025, 150.0), (2026, 300.0)]
    assert resp.year_over_year[1].growth == pytest.approx(50.0)
    starts = [p.start for p in resp.upcoming_high_periods]
    assert starts == sorted(starts)
    assert all(p.end >= TODAY for p in resp.upcoming_high_periods)


@pytest.mark.asyncio
async def test_concurrent_forecasts_for_many_users_are_independent(service, source):
    for i in range(10):
        source.add(f"u{i}", daily([10.0 * (i + 1)] * 30))

    responses = await asyncio.gather(*[
        service.generate_forecast(ForecastRequest(user_id=f"u{i}", horizon_days=5)) for i in range(10)
    ])
    for i, resp in enumerate(responses):
        assert resp.user_id == f"u{i}"
        assert resp.base_revenue == pytest.approx(10.0 * (i + 1))
        assert resp.stored


@pytest.mark.asyncio
async def test_history_is_cached_between_calls(service, source):
    source.add("u1", daily([40.0] * 30))
    await service.generate_forecast(ForecastRequest(user_id="u1", horizon_days=1))
    await service.generate_forecast(ForecastRequest(user_id="u1", horizon_days=1))
    assert source.calls == 1


@pytest.mark.asyncio
async def test_build_service_injects_configured_seasonality_table(tmp_path, monkeypatch):
    from config import settings
    from database import dispose_database
    from services.forecast_service import build_service

    table = {
        "version": "custom-1",
        "day_of_week": [1.0] * 7,
        "month_of_year": [1.0] * 12,
        "holidays": [],
    }
    path = tmp_path / "season.json"
    path.write_text(json.dumps(table), encoding="utf-8")
    monkeypatch.setattr(settings, "seasonality_table_path", str(path))

    dispose_database()
    svc = build_service(f"sqlite:///{tmp_path / 'svc.db'}")
    try:
        assert svc.pattern.version == "custom-1"
    finally:
        await svc.aclose()
        dispose_database()
