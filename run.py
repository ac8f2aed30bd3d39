#!/usr/bin/env python3

"""
Command-line runner for the revenue forecasting operations, printing each result as JSON.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from api.requests import (
    AccuracyQuery,
    BreakdownRequest,
    ForecastRequest,
    ReleaseImpactRequest,
    SeasonalityRequest,
    StoredForecastQuery,
)

log = logging.getLogger("run")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run revenue forecasting operations")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy URL (defaults to REVCAST_DATABASE_URL)")
    parser.add_argument("--log-level", default="INFO", help="logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("forecast", help="generate and store a forecast")
    p.add_argument("user_id")
    p.add_argument("--horizon", type=int, default=None, help="horizon in days")
    p.add_argument("--platform", default=None)
    p.add_argument("--granularity", default="daily", choices=["daily", "weekly", "monthly"])

    p = sub.add_parser("history", help="list stored forecasts, most recent first")
    p.add_argument("user_id")
    p.add_argument("--platform", default=None)
    p.add_argument("--start", default=None, help="YYYY-MM-DD")
    p.add_argument("--end", default=None, help="YYYY-MM-DD")
    p.add_argument("--limit", type=int, default=None)

    p = sub.add_parser("accuracy", help="score stored forecasts against actuals")
    p.add_argument("user_id")
    p.add_argument("--platform", default=None)

    p = sub.add_parser("release", help="project the impact of a release")
    p.add_argument("user_id")
    p.add_argument("--release-date", required=True, help="YYYY-MM-DD")
    p.add_argument("--track", required=True)
    p.add_argument("--genre", default=None)
    p.add_argument("--pre-saves", action="store_true")
    p.add_argument("--marketing-budget", type=float, default=None)
    p.add_argument("--previous-performance", type=float, default=None)

    p = sub.add_parser("breakdown", help="revenue breakdown with 30/90 day projections")
    p.add_argument("user_id")
    p.add_argument("--start", default=None, help="YYYY-MM-DD")
    p.add_argument("--end", default=None, help="YYYY-MM-DD")

    p = sub.add_parser("seasonality", help="seasonality tables and upcoming high periods")
    p.add_argument("user_id")

    return parser


def _drop_none(**kwargs: Any) -> dict:
    return {k: v for k, v in kwargs.items() if v is not None}


def build_request(args: argparse.Namespace) -> Tuple[str, BaseModel]:
    """Map parsed arguments to the service method name and its validated request."""
    if args.command == "forecast":
        return "generate_forecast", ForecastRequest(**_drop_none(
            user_id=args.user_id,
            horizon_days=args.horizon,
            platform=args.platform,
            granularity=args.granularity,
        ))
    if args.command == "history":
        return "get_stored_forecasts", StoredForecastQuery(**_drop_none(
            user_id=args.user_id,
            platform=args.platform,
            start_date=args.start,
            end_date=args.end,
            limit=args.limit,
        ))
    if args.command == "accuracy":
        return "get_forecast_accuracy", AccuracyQuery(**_drop_none(
            user_id=args.user_id,
            platform=args.platform,
        ))
    if args.command == "release":
        return "project_release_impact", ReleaseImpactRequest(**_drop_none(
            user_id=args.user_id,
            release_date=args.release_date,
            track_name=args.track,
            genre=args.genre,
            has_pre_saves=args.pre_saves,
            marketing_budget=args.marketing_budget,
            previous_release_performance=args.previous_performance,
        ))
    if args.command == "breakdown":
        return "get_revenue_breakdown", BreakdownRequest(**_drop_none(
            user_id=args.user_id,
            start_date=args.start,
            end_date=args.end,
        ))
    if args.command == "seasonality":
        return "get_seasonality_analysis", SeasonalityRequest(user_id=args.user_id)
    raise ValueError(f"unknown command {args.command!r}")


def to_jsonable(result: Any) -> Any:
    if isinstance(result, list):
        return [to_jsonable(r) for r in result]
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    return result


async def execute(method: str, request: BaseModel, database_url: Optional[str]) -> Any:
    from database import dispose_database
    from services.forecast_service import build_service

    service = build_service(database_url)
    try:
        return await getattr(service, method)(request)
    finally:
        await service.aclose()
        dispose_database()


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    try:
        method, request = build_request(args)
    except ValidationError as exc:
        print(f"invalid input:\n{exc}", file=sys.stderr)
        return 2

    try:
        result = asyncio.run(execute(method, request, args.database_url))
    except RuntimeError as exc:
        log.error("%s failed: %s", args.command, exc)
        return 1

    print(json.dumps(to_jsonable(result), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
