"""
TTL cache of loaded revenue history, keyed by user, platform and date window.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import List, Optional

from engine.enums import Platform
from engine.series.loader import RevenueObservation
from store.client import KeyValueClient
from store import keys
from config import settings

log = logging.getLogger(__name__)


def _to_json(observations: List[RevenueObservation]) -> str:
    return json.dumps([
        {
            "date": o.date.isoformat(),
            "value": o.value,
            "platform": o.platform.value if o.platform else None,
        }
        for o in observations
    ])


def _from_json(data: str) -> List[RevenueObservation]:
    return [
        RevenueObservation(
            date=date.fromisoformat(d["date"]),
            value=float(d["value"]),
            platform=Platform(d["platform"]) if d.get("platform") else None,
        )
        for d in json.loads(data)
    ]


class HistoryCache:
    def __init__(self, client: KeyValueClient, ttl: Optional[int] = None) -> None:
        self.client = client
        self.ttl = ttl if ttl is not None else settings.history_cache_ttl

    @staticmethod
    def _key(user_id: str, platform: Optional[Platform], start: date, end: date) -> str:
        return keys.history(user_id, platform.value if platform else None, start, end)

    async def get(
        self,
        user_id: str,
        platform: Optional[Platform],
        start: date,
        end: date,
    ) -> Optional[List[RevenueObservation]]:
        try:
            raw = await self.client.get(self._key(user_id, platform, start, end))
            if raw:
                return _from_json(raw)
        except Exception as exc:
            log.debug("History load failed %s: %s", user_id, exc)
        return None

    async def put(
        self,
        user_id: str,
        platform: Optional[Platform],
        start: date,
        end: date,
        observations: List[RevenueObservation],
    ) -> None:
        try:
            await self.client.set(
                self._key(user_id, platform, start, end),
                _to_json(observations),
                ttl=self.ttl,
            )
        except Exception as exc:
            log.debug("History save failed %s: %s", user_id, exc)

    async def invalidate(
        self,
        user_id: str,
        platform: Optional[Platform],
        start: date,
        end: date,
    ) -> None:
        try:
            await self.client.delete(self._key(user_id, platform, start, end))
        except Exception as exc:
            log.debug("History invalidate failed %s: %s", user_id, exc)
