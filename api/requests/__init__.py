"""
Request models validating caller input before any I/O or computation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from engine.enums import Granularity, Platform
from config import settings


class _DateRange(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _ordered(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class ForecastRequest(BaseModel):
    user_id: str = Field(min_length=1)
    horizon_days: int = Field(default_factory=lambda: settings.default_horizon_days, ge=1)
    platform: Optional[Platform] = None
    granularity: Granularity = Granularity.daily

    @field_validator("horizon_days")
    @classmethod
    def _horizon_cap(cls, v: int) -> int:
        if v > settings.max_horizon_days:
            raise ValueError(f"horizon_days must be at most {settings.max_horizon_days}")
        return v


class StoredForecastQuery(_DateRange):
    user_id: str = Field(min_length=1)
    platform: Optional[Platform] = None
    limit: int = Field(default_factory=lambda: settings.stored_forecast_limit, ge=1)

    @field_validator("limit")
    @classmethod
    def _limit_cap(cls, v: int) -> int:
        return min(v, settings.stored_forecast_limit)


class AccuracyQuery(BaseModel):
    user_id: str = Field(min_length=1)
    platform: Optional[Platform] = None


class ReleaseImpactRequest(BaseModel):
    user_id: str = Field(min_length=1)
    release_date: date
    track_name: str = Field(min_length=1)
    genre: Optional[str] = None
    has_pre_saves: bool = False
    marketing_budget: Optional[float] = Field(default=None, ge=0.0)
    previous_release_performance: Optional[float] = Field(default=None, ge=0.0)


class BreakdownRequest(_DateRange):
    user_id: str = Field(min_length=1)


class SeasonalityRequest(BaseModel):
    user_id: str = Field(min_length=1)
