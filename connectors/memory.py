"""
In-process revenue observation store holding observations per user in memory.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from datasources.base import RevenueSource
from engine.enums import Platform
from engine.series.loader import RevenueObservation


class InMemoryRevenueSource(RevenueSource):
    def __init__(self, data: Optional[Dict[str, Iterable[RevenueObservation]]] = None) -> None:
        self._data: Dict[str, List[RevenueObservation]] = defaultdict(list)
        self.calls = 0
        for user_id, observations in (data or {}).items():
            self.add(user_id, observations)

    def add(self, user_id: str, observations: Iterable[RevenueObservation]) -> None:
        self._data[user_id].extend(observations)

    async def fetch(
        self,
        user_id: str,
        start: date,
        end: date,
        platform: Optional[Platform] = None,
    ) -> List[RevenueObservation]:
        self.calls += 1
        return sorted(
            (
                o for o in self._data.get(user_id, [])
                if start <= o.date <= end and (platform is None or o.platform == platform)
            ),
            key=lambda o: o.date,
        )
