"""
Momentum estimation comparing the trailing week of revenue to the week before it, and the geometric decay of that ratio across a forecast horizon.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from config import settings

NEUTRAL = 1.0


def estimate(vals: Sequence[float], window: int | None = None) -> float:
    if window is None:
        window = settings.momentum_window
    arr = np.asarray(vals, dtype=float)
    if len(arr) < window * 2:
        return NEUTRAL

    recent = float(np.mean(arr[-window:]))
    previous = float(np.mean(arr[-2 * window:-window]))
    if previous <= 0:
        return NEUTRAL
    return recent / previous


def momentum_factor(days_ahead: int, momentum: float, decay: float | None = None) -> float:
    if decay is None:
        decay = settings.momentum_decay
    weight = decay ** (days_ahead / settings.momentum_decay_period_days)
    return 1.0 + (momentum - 1.0) * weight
