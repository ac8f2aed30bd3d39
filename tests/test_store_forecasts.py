"""
Test Suite for the Forecast Store

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import TODAY, daily
from engine.enums import DataQuality, Granularity, Platform
from engine.forecast import generate
from engine.series import from_observations
from store.forecasts import ForecastAlreadyReconciled


def _run(horizon=5, granularity=Granularity.daily):
    series = from_observations(daily([100.0 + i for i in range(30)]), end=TODAY, window_days=180)
    return generate(series, today=TODAY, horizon_days=horizon, granularity=granularity)


@pytest.mark.asyncio
async def test_save_and_list_round_trip(forecast_store):
    run = _run()
    ids = await forecast_store.save_run("u1", run, Platform.spotify)
    assert len(ids) == 5

    records = await forecast_store.list("u1")
    assert len(records) == 5
    by_date = {r.target_period_start: r for r in records}
    first = run.points[0]
    stored = by_date[first.target_date]
    assert stored.point == first
    assert stored.platform == Platform.spotify
    assert stored.granularity == Granularity.daily
    assert stored.model_version == "2.0.0"
    assert stored.actual_revenue is None
    assert stored.model_inputs["data_quality"] == DataQuality.real.value
    assert stored.model_inputs["factors"]["seasonality"] == first.factors.seasonality


@pytest.mark.asyncio
async def test_list_filters_and_orders_most_recent_first(forecast_store):
    older = datetime(2026, 3, 1, tzinfo=timezone.utc)
    newer = datetime(2026, 3, 9, tzinfo=timezone.utc)
    await forecast_store.save_run("u1", _run(3), None, forecast_date=older)
    await forecast_store.save_run("u1", _run(3), Platform.apple, forecast_date=newer)
    await forecast_store.save_run("u2", _run(3), None)

    records = await forecast_store.list("u1")
    assert len(records) == 6
    assert records[0].platform == Platform.apple
    assert records[-1].platform is None

    apple = await forecast_store.list("u1", platform=Platform.apple)
    assert len(apple) == 3

    window = await forecast_store.list(
        "u1",
        start_date=TODAY + timedelta(days=2),
        end_date=TODAY + timedelta(days=2),
    )
    assert len(window) == 2
    assert all(r.target_period_start == TODAY + timedelta(days=2) for r in window)


@pytest.mark.asyncio
async def test_list_is_capped(forecast_store):
    await forecast_store.save_run("u1", _run(120), None)
    assert len(await forecast_store.list("u1")) == 100
    assert len(await forecast_store.list("u1", limit=10)) == 10


@pytest.mark.asyncio
async def test_attach_actual_happens_once(forecast_store):
    ids = await forecast_store.save_run("u1", _run(1), None)
    record = await forecast_store.attach_actual(ids[0], 88.0)
    assert record.actual_revenue == 88.0
    assert record.reconciled_at is not None
    with pytest.raises(ForecastAlreadyReconciled):
        await forecast_store.attach_actual(ids[0], 90.0)


@pytest.mark.asyncio
async def test_attach_actual_rejects_unknown_and_negative(forecast_store):
    with pytest.raises(LookupError):
        await forecast_store.attach_actual("missing", 1.0)
    ids = await forecast_store.save_run("u1", _run(1), None)
    with pytest.raises(ValueError):
        await forecast_store.attach_actual(ids[0], -1.0)


@pytest.mark.asyncio
async def test_reconciled_returns_latest_records_in_date_order(forecast_store):
    ids = await forecast_store.save_run("u1", _run(60), None)
    for record_id in ids:
        await forecast_store.attach_actual(record_id, 100.0)

    reconciled = await forecast_store.reconciled("u1")
    assert len(reconciled) == 52
    dates = [r.target_date for r in reconciled]
    assert dates == sorted(dates)
    assert dates[-1] == TODAY + timedelta(days=60)
    assert all(r.actual == 100.0 for r in reconciled)


@pytest.mark.asyncio
async def test_reconciled_skips_pending_records(forecast_store):
    ids = await forecast_store.save_run("u1", _run(3), None)
    await forecast_store.attach_actual(ids[1], 50.0)
    reconciled = await forecast_store.reconciled("u1")
    assert len(reconciled) == 1
    assert reconciled[0].actual == 50.0
