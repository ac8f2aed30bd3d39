"""
Shared helper functions for observation store connectors.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from datasources.exceptions import DataSourceUnavailable, InvalidPayload, InvalidQuery, QueryTimeout
from engine.enums import Platform
from engine.series.loader import RevenueObservation


async def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = 30,
    invalid_msg: str = "query failed",
    timeout_msg: str = "query timed out",
    unavailable_msg: str = "Cannot reach data source at",
) -> Dict[str, Any]:
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.json()
    except httpx.HTTPStatusError as e:
        raise InvalidQuery(f"{invalid_msg} [{e.response.status_code}]: {e.response.text}") from e
    except httpx.TimeoutException as e:
        raise QueryTimeout(timeout_msg) from e
    except httpx.RequestError as e:
        raise DataSourceUnavailable(f"{unavailable_msg} {url}") from e


def parse_observations(payload: Dict[str, Any]) -> List[RevenueObservation]:
    rows = payload.get("observations")
    if not isinstance(rows, list):
        raise InvalidPayload("response is missing an 'observations' list")

    result: List[RevenueObservation] = []
    for row in rows:
        try:
            platform = row.get("platform")
            result.append(RevenueObservation(
                date=date.fromisoformat(str(row["date"])[:10]),
                value=max(0.0, float(row.get("revenue", 0) or 0)),
                platform=Platform(platform) if platform else None,
            ))
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidPayload(f"malformed observation {row!r}: {exc}") from exc
    return result
