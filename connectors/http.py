"""
Revenue observation store backed by the revenue-ingestion HTTP service.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional

from datasources.base import RevenueSource
from datasources.exceptions import TRANSIENT_ERRORS
from datasources.helpers import fetch_json, parse_observations
from datasources.retry import retry
from engine.enums import Platform
from engine.series.loader import RevenueObservation
from config import settings


class HttpRevenueSource(RevenueSource):
    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        headers: Optional[Dict[str, str]] = None,
        attempts: Optional[int] = None,
        delay: Optional[float] = None,
    ):
        self.base_url = str(base_url).rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}
        self.attempts = attempts if attempts is not None else settings.connector_retry_attempts
        self.delay = delay if delay is not None else settings.connector_retry_delay

    def _url(self, user_id: str) -> str:
        return f"{self.base_url}/api/v1/users/{user_id}/revenue"

    async def _fetch_once(self, url: str, params: Dict[str, Any]) -> List[RevenueObservation]:
        payload = await fetch_json(
            url,
            params=params,
            headers=self.headers,
            timeout=self.timeout,
            invalid_msg="Revenue query failed",
            timeout_msg="Revenue query timed out",
            unavailable_msg="Cannot reach revenue service at",
        )
        return parse_observations(payload)

    async def fetch(
        self,
        user_id: str,
        start: date,
        end: date,
        platform: Optional[Platform] = None,
    ) -> List[RevenueObservation]:
        params: Dict[str, Any] = {"start": start.isoformat(), "end": end.isoformat()}
        if platform is not None:
            params["platform"] = platform.value

        fetch = retry(attempts=self.attempts, delay=self.delay, exceptions=TRANSIENT_ERRORS)(self._fetch_once)
        observations = await fetch(self._url(user_id), params)
        if platform is None:
            return observations
        # untagged rows of a platform-scoped response belong to that platform
        return [o if o.platform else replace(o, platform=platform) for o in observations]
