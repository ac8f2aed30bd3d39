"""
Enumerations for Platforms, Granularity, Trend Direction, Data Quality and Accuracy Trend

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum


class Platform(str, Enum):
    spotify = "spotify"
    apple = "apple"
    youtube = "youtube"
    amazon = "amazon"
    tidal = "tidal"
    deezer = "deezer"
    soundcloud = "soundcloud"
    pandora = "pandora"


class Granularity(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"

    @property
    def step_days(self) -> int:
        return _STEP_DAYS[self]


_STEP_DAYS = {
    Granularity.daily: 1,
    Granularity.weekly: 7,
    Granularity.monthly: 30,
}


class TrendDirection(str, Enum):
    up = "up"
    down = "down"
    stable = "stable"


class DataQuality(str, Enum):
    real = "real"
    synthetic = "synthetic"


class AccuracyTrendLabel(str, Enum):
    improving = "improving"
    stable = "stable"
    declining = "declining"
