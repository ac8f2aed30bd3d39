"""
Release impact projection over a ramp-then-decay revenue curve.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.release.impact import (
    ReleaseImpactProjection,
    decay_curve,
    marketing_boost,
    peak_revenue,
    project,
)

__all__ = ["ReleaseImpactProjection", "decay_curve", "marketing_boost", "peak_revenue", "project"]
