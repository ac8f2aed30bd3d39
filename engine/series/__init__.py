"""
Historical revenue series loading with explicit real/synthetic tagging.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.series.loader import (
    RevenueObservation,
    RevenueSeries,
    fetch_observations,
    from_observations,
    group_by_date,
    load,
    synthesize,
)

__all__ = [
    "RevenueObservation", "RevenueSeries", "fetch_observations", "from_observations",
    "group_by_date", "load", "synthesize",
]
