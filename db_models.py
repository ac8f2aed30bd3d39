"""
ORM tables for revenue observations and persisted forecasts.
"""
from __future__ import annotations

import uuid
from datetime import date, datetime
from sqlalchemy import JSON, Date, DateTime, Float, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class RevenueObservationRow(Base):
    __tablename__ = "revenue_observations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    platform: Mapped[str | None] = mapped_column(String(32), nullable=True)
    observed_on: Mapped[date] = mapped_column(Date, nullable=False)
    revenue: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    streams: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_revenue_observations_user_date", "user_id", "observed_on"),
        Index("ix_revenue_observations_user_platform_date", "user_id", "platform", "observed_on"),
    )


class RevenueForecastRow(Base):
    __tablename__ = "revenue_forecasts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    forecast_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    target_period_start: Mapped[date] = mapped_column(Date, nullable=False)
    target_period_end: Mapped[date] = mapped_column(Date, nullable=False)
    platform: Mapped[str | None] = mapped_column(String(32), nullable=True)
    granularity: Mapped[str] = mapped_column(String(16), nullable=False)
    predicted_revenue: Mapped[float] = mapped_column(Float, nullable=False)
    confidence_low: Mapped[float] = mapped_column(Float, nullable=False)
    confidence_high: Mapped[float] = mapped_column(Float, nullable=False)
    confidence_level: Mapped[float] = mapped_column(Float, nullable=False)
    scenario_best: Mapped[float] = mapped_column(Float, nullable=False)
    scenario_expected: Mapped[float] = mapped_column(Float, nullable=False)
    scenario_worst: Mapped[float] = mapped_column(Float, nullable=False)
    predicted_streams: Mapped[int] = mapped_column(Integer, nullable=False)
    predicted_listeners: Mapped[int] = mapped_column(Integer, nullable=False)
    trend_factor: Mapped[float] = mapped_column(Float, nullable=False)
    seasonality_factor: Mapped[float] = mapped_column(Float, nullable=False)
    momentum_factor: Mapped[float] = mapped_column(Float, nullable=False)
    data_quality: Mapped[str] = mapped_column(String(16), nullable=False)
    model_version: Mapped[str] = mapped_column(String(32), nullable=False)
    model_inputs: Mapped[dict] = mapped_column(JSON, nullable=False)
    actual_revenue: Mapped[float | None] = mapped_column(Float, nullable=True)
    reconciled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_revenue_forecasts_user_forecast_date", "user_id", "forecast_date"),
        Index("ix_revenue_forecasts_user_platform_target", "user_id", "platform", "target_period_start"),
    )
