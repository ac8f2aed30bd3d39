"""
Linear trend fitting and extrapolation for revenue series.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.trend.analyzer import TrendAnalysis, analyze, direction_for, trend_factor

__all__ = ["TrendAnalysis", "analyze", "direction_for", "trend_factor"]
