"""
Forecast store persisting every generated forecast point for later backtesting, and recording the one-time reconciliation of each point with its observed revenue.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, desc, select

from database import get_db_session
from db_models import RevenueForecastRow
from engine.backtest import ReconciledForecast
from engine.enums import DataQuality, Granularity, Platform
from engine.forecast import ConfidenceInterval, ForecastFactors, ForecastPoint, ForecastRun, Scenario
from config import settings

log = logging.getLogger(__name__)


class ForecastAlreadyReconciled(Exception):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StoredForecastRecord:
    id: str
    user_id: str
    forecast_date: datetime
    target_period_start: date
    target_period_end: date
    platform: Optional[Platform]
    granularity: Granularity
    point: ForecastPoint
    model_version: str
    model_inputs: Dict[str, Any]
    actual_revenue: Optional[float] = None
    reconciled_at: Optional[datetime] = None


def _to_record(row: RevenueForecastRow) -> StoredForecastRecord:
    point = ForecastPoint(
        target_date=row.target_period_end,
        days_ahead=int(row.model_inputs.get("days_ahead", 0)),
        predicted_revenue=row.predicted_revenue,
        predicted_streams=row.predicted_streams,
        predicted_listeners=row.predicted_listeners,
        confidence=ConfidenceInterval(
            level=row.confidence_level,
            low=row.confidence_low,
            high=row.confidence_high,
        ),
        scenario=Scenario(
            best=row.scenario_best,
            expected=row.scenario_expected,
            worst=row.scenario_worst,
        ),
        factors=ForecastFactors(
            trend=row.trend_factor,
            seasonality=row.seasonality_factor,
            momentum=row.momentum_factor,
        ),
        data_quality=DataQuality(row.data_quality),
    )
    return StoredForecastRecord(
        id=row.id,
        user_id=row.user_id,
        forecast_date=row.forecast_date,
        target_period_start=row.target_period_start,
        target_period_end=row.target_period_end,
        platform=Platform(row.platform) if row.platform else None,
        granularity=Granularity(row.granularity),
        point=point,
        model_version=row.model_version,
        model_inputs=dict(row.model_inputs or {}),
        actual_revenue=row.actual_revenue,
        reconciled_at=row.reconciled_at,
    )


def _to_row(
    user_id: str,
    point: ForecastPoint,
    run: ForecastRun,
    platform: Optional[Platform],
    forecast_date: datetime,
    model_version: str,
) -> RevenueForecastRow:
    inputs = run.model_inputs()
    inputs["days_ahead"] = point.days_ahead
    inputs["factors"] = {
        "trend": point.factors.trend,
        "seasonality": point.factors.seasonality,
        "momentum": point.factors.momentum,
    }
    inputs["confidence"] = {
        "level": point.confidence.level,
        "low": point.confidence.low,
        "high": point.confidence.high,
    }
    return RevenueForecastRow(
        id=str(uuid.uuid4()),
        user_id=user_id,
        forecast_date=forecast_date,
        target_period_start=point.target_date,
        target_period_end=point.target_date,
        platform=platform.value if platform else None,
        granularity=run.granularity.value,
        predicted_revenue=point.predicted_revenue,
        confidence_low=point.confidence.low,
        confidence_high=point.confidence.high,
        confidence_level=point.confidence.level,
        scenario_best=point.scenario.best,
        scenario_expected=point.scenario.expected,
        scenario_worst=point.scenario.worst,
        predicted_streams=point.predicted_streams,
        predicted_listeners=point.predicted_listeners,
        trend_factor=point.factors.trend,
        seasonality_factor=point.factors.seasonality,
        momentum_factor=point.factors.momentum,
        data_quality=point.data_quality.value,
        model_version=model_version,
        model_inputs=inputs,
    )


class ForecastStore:
    def __init__(self, model_version: Optional[str] = None) -> None:
        self.model_version = model_version or settings.model_version

    def _save_sync(
        self,
        user_id: str,
        run: ForecastRun,
        platform: Optional[Platform],
        forecast_date: datetime,
    ) -> List[str]:
        rows = [
            _to_row(user_id, point, run, platform, forecast_date, self.model_version)
            for point in run.points
        ]
        with get_db_session() as db:
            db.add_all(rows)
        return [r.id for r in rows]

    async def save_run(
        self,
        user_id: str,
        run: ForecastRun,
        platform: Optional[Platform] = None,
        forecast_date: Optional[datetime] = None,
    ) -> List[str]:
        ids = await asyncio.to_thread(
            self._save_sync, user_id, run, platform, forecast_date or _utcnow()
        )
        log.info("Stored %d forecasts for user %s", len(ids), user_id)
        return ids

    def _list_sync(
        self,
        user_id: str,
        platform: Optional[Platform],
        start_date: Optional[date],
        end_date: Optional[date],
        limit: int,
    ) -> List[StoredForecastRecord]:
        row = RevenueForecastRow
        conditions = [row.user_id == user_id]
        if platform is not None:
            conditions.append(row.platform == platform.value)
        if start_date is not None:
            conditions.append(row.target_period_start >= start_date)
        if end_date is not None:
            conditions.append(row.target_period_end <= end_date)

        stmt = (
            select(row)
            .where(and_(*conditions))
            .order_by(desc(row.forecast_date), row.target_period_start)
            .limit(limit)
        )
        with get_db_session() as db:
            return [_to_record(r) for r in db.scalars(stmt).all()]

    async def list(
        self,
        user_id: str,
        platform: Optional[Platform] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> List[StoredForecastRecord]:
        limit = limit or settings.stored_forecast_limit
        return await asyncio.to_thread(self._list_sync, user_id, platform, start_date, end_date, limit)

    def _reconciled_sync(
        self,
        user_id: str,
        platform: Optional[Platform],
        limit: int,
    ) -> List[ReconciledForecast]:
        row = RevenueForecastRow
        conditions = [row.user_id == user_id, row.actual_revenue.is_not(None)]
        if platform is not None:
            conditions.append(row.platform == platform.value)

        stmt = (
            select(row.target_period_start, row.predicted_revenue, row.actual_revenue)
            .where(and_(*conditions))
            .order_by(desc(row.target_period_start))
            .limit(limit)
        )
        with get_db_session() as db:
            rows = db.execute(stmt).all()
        return [
            ReconciledForecast(target_date=target, predicted=float(predicted), actual=float(actual))
            for target, predicted, actual in reversed(rows)
        ]

    async def reconciled(
        self,
        user_id: str,
        platform: Optional[Platform] = None,
        limit: Optional[int] = None,
    ) -> List[ReconciledForecast]:
        limit = limit or settings.accuracy_record_limit
        return await asyncio.to_thread(self._reconciled_sync, user_id, platform, limit)

    def _attach_actual_sync(self, record_id: str, actual: float, reconciled_at: datetime) -> StoredForecastRecord:
        with get_db_session() as db:
            row = db.get(RevenueForecastRow, record_id)
            if row is None:
                raise LookupError(f"forecast {record_id} not found")
            if row.actual_revenue is not None:
                raise ForecastAlreadyReconciled(f"forecast {record_id} already has an actual revenue")
            row.actual_revenue = actual
            row.reconciled_at = reconciled_at
            return _to_record(row)

    async def attach_actual(
        self,
        record_id: str,
        actual: float,
        reconciled_at: Optional[datetime] = None,
    ) -> StoredForecastRecord:
        if actual < 0:
            raise ValueError("actual revenue cannot be negative")
        return await asyncio.to_thread(
            self._attach_actual_sync, record_id, float(actual), reconciled_at or _utcnow()
        )
