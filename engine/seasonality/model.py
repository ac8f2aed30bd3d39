"""
Seasonality model built from a fixed, versioned multiplier table keyed by day of week, month of year and recurring holiday date. The table is configuration rather than something fitted from data, and can be replaced by a JSON file without touching forecast generation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from config import settings

log = logging.getLogger(__name__)

_MONTH_DAY_RE = re.compile(r"^(0[1-9]|1[0-2])-(0[1-9]|[12][0-9]|3[01])$")


@dataclass(frozen=True)
class Holiday:
    month_day: str
    multiplier: float


@dataclass(frozen=True)
class SeasonalityPattern:
    version: str
    day_of_week: Tuple[float, ...]
    month_of_year: Tuple[float, ...]
    holidays: Tuple[Holiday, ...]

    def holiday_multiplier(self, day: date) -> float:
        key = f"{day.month:02d}-{day.day:02d}"
        for h in self.holidays:
            if h.month_day == key:
                return h.multiplier
        return 1.0


# Monday first, matching date.weekday()
DEFAULT_PATTERN = SeasonalityPattern(
    version="2.0.0",
    day_of_week=(1.0, 1.0, 1.0, 1.0, 1.1, 1.15, 1.0),
    month_of_year=(0.9, 0.85, 0.95, 1.0, 1.05, 1.15, 1.1, 1.05, 1.0, 1.05, 1.2, 1.35),
    holidays=(
        Holiday("12-25", 1.5),
        Holiday("12-31", 1.4),
        Holiday("01-01", 1.3),
        Holiday("07-04", 1.2),
    ),
)


class HolidayTable(BaseModel):
    date: str
    multiplier: float = Field(gt=0.0)

    @field_validator("date")
    @classmethod
    def validate_month_day(cls, v: str) -> str:
        if not _MONTH_DAY_RE.match(v):
            raise ValueError(f"holiday date must be MM-DD, got {v!r}")
        return v


class SeasonalityTable(BaseModel):
    version: str
    day_of_week: List[float] = Field(min_length=7, max_length=7)
    month_of_year: List[float] = Field(min_length=12, max_length=12)
    holidays: List[HolidayTable] = Field(default_factory=list)

    def to_pattern(self) -> SeasonalityPattern:
        return SeasonalityPattern(
            version=self.version,
            day_of_week=tuple(self.day_of_week),
            month_of_year=tuple(self.month_of_year),
            holidays=tuple(Holiday(h.date, h.multiplier) for h in self.holidays),
        )


def load_pattern(path: str | Path) -> SeasonalityPattern:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    pattern = SeasonalityTable.model_validate(raw).to_pattern()
    log.info("Loaded seasonality table version %s from %s", pattern.version, path)
    return pattern


def configured_pattern(path: Optional[str] = None) -> SeasonalityPattern:
    path = path if path is not None else settings.seasonality_table_path
    if not path:
        return DEFAULT_PATTERN
    return load_pattern(path)


def factor_for(day: date, pattern: SeasonalityPattern = DEFAULT_PATTERN) -> float:
    return (
        pattern.day_of_week[day.weekday()]
        * pattern.month_of_year[day.month - 1]
        * pattern.holiday_multiplier(day)
    )
