"""
Revenue observation store backed by the revenue_observations table.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import and_, func, select

from database import get_db_session
from datasources.base import RevenueSource
from db_models import RevenueObservationRow
from engine.enums import Platform
from engine.series.loader import RevenueObservation

log = logging.getLogger(__name__)


def _platform(value: Optional[str]) -> Optional[Platform]:
    if not value:
        return None
    try:
        return Platform(value)
    except ValueError:
        log.debug("ignoring unknown platform %r in revenue_observations", value)
        return None


class SqlRevenueSource(RevenueSource):
    def _fetch_sync(
        self,
        user_id: str,
        start: date,
        end: date,
        platform: Optional[Platform],
    ) -> List[RevenueObservation]:
        row = RevenueObservationRow
        conditions = [row.user_id == user_id, row.observed_on >= start, row.observed_on <= end]
        if platform is not None:
            conditions.append(row.platform == platform.value)

        stmt = (
            select(row.observed_on, row.platform, func.coalesce(func.sum(row.revenue), 0.0))
            .where(and_(*conditions))
            .group_by(row.observed_on, row.platform)
            .order_by(row.observed_on)
        )
        with get_db_session() as db:
            return [
                RevenueObservation(date=day, value=float(total), platform=_platform(plat))
                for day, plat, total in db.execute(stmt).all()
            ]

    async def fetch(
        self,
        user_id: str,
        start: date,
        end: date,
        platform: Optional[Platform] = None,
    ) -> List[RevenueObservation]:
        return await asyncio.to_thread(self._fetch_sync, user_id, start, end, platform)
