#!/usr/bin/env python3

"""
Script to benchmark concurrent forecast generation for many independent users.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import statistics
import sys
import tempfile
import time
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta

import numpy as np

from api.requests import ForecastRequest
from connectors.memory import InMemoryRevenueSource
from database import dispose_database, init_database, init_db
from engine.enums import Granularity, Platform
from engine.series import RevenueObservation
from services.forecast_service import RevenueForecastService
from store.client import KeyValueClient
from store.forecasts import ForecastStore
from store.history import HistoryCache

log = logging.getLogger("stress")


@dataclass(frozen=True)
class RunConfig:
    database_url: str
    users: int
    history_days: int
    sparse_every: int
    horizon_days: int
    granularity: Granularity
    concurrency: int
    requests: int
    warmup: int
    seed: int


@dataclass(frozen=True)
class Result:
    latency_ms: float
    points: int
    quality: str
    stored: bool
    error: str | None = None


def _parse_args() -> RunConfig:
    parser = argparse.ArgumentParser(description="Concurrent forecast generation benchmark")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy URL for the forecast store")
    parser.add_argument("--users", type=int, default=20, help="Distinct users, round-robin distributed")
    parser.add_argument("--history-days", type=int, default=365, help="Days of history per user")
    parser.add_argument(
        "--sparse-every",
        type=int,
        default=5,
        help="Every Nth user gets too little history and exercises the synthetic fallback (0 disables)",
    )
    parser.add_argument("--horizon", type=int, default=90, help="Forecast horizon (days)")
    parser.add_argument("--granularity", default="daily", choices=["daily", "weekly", "monthly"])
    parser.add_argument("--concurrency", type=int, default=8, help="Concurrent workers")
    parser.add_argument("--requests", type=int, default=200, help="Total measured requests")
    parser.add_argument("--warmup", type=int, default=10, help="Warmup requests (not measured)")
    parser.add_argument("--seed", type=int, default=7, help="Seed for generated history")
    args = parser.parse_args()

    if args.users < 1:
        raise SystemExit("--users must be >= 1")
    if args.concurrency < 1:
        raise SystemExit("--concurrency must be >= 1")
    if args.requests < 1:
        raise SystemExit("--requests must be >= 1")
    if args.warmup < 0:
        raise SystemExit("--warmup must be >= 0")

    database_url = args.database_url
    if not database_url:
        database_url = f"sqlite:///{os.path.join(tempfile.mkdtemp(prefix='revcast-stress-'), 'stress.db')}"

    return RunConfig(
        database_url=database_url,
        users=args.users,
        history_days=args.history_days,
        sparse_every=args.sparse_every,
        horizon_days=args.horizon,
        granularity=Granularity(args.granularity),
        concurrency=args.concurrency,
        requests=args.requests,
        warmup=args.warmup,
        seed=args.seed,
    )


def _user_id(idx: int) -> str:
    return f"stress-user-{idx:04d}"


def _history(cfg: RunConfig, user_idx: int, today: date, rng: np.random.Generator) -> list[RevenueObservation]:
    days = 3 if cfg.sparse_every and user_idx % cfg.sparse_every == 0 else cfg.history_days
    platforms = list(Platform)
    base = rng.uniform(20.0, 400.0)
    slope = rng.normal(0.0, 0.3)
    out: list[RevenueObservation] = []
    for i in range(days):
        day = today - timedelta(days=days - i)
        weekly = 1.0 + 0.1 * np.sin(2 * np.pi * day.weekday() / 7)
        value = max(0.0, (base + slope * i) * weekly + rng.normal(0.0, base * 0.05))
        out.append(RevenueObservation(date=day, value=float(value), platform=platforms[i % len(platforms)]))
    return out


def _percentile(sorted_values: list[float], p: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return sorted_values[0]
    rank = (len(sorted_values) - 1) * p
    lower = int(rank)
    upper = min(lower + 1, len(sorted_values) - 1)
    frac = rank - lower
    return sorted_values[lower] * (1.0 - frac) + sorted_values[upper] * frac


async def _one_request(service: RevenueForecastService, cfg: RunConfig, idx: int) -> Result:
    req = ForecastRequest(
        user_id=_user_id(idx % cfg.users),
        horizon_days=cfg.horizon_days,
        granularity=cfg.granularity,
    )
    t0 = time.perf_counter()
    try:
        resp = await service.generate_forecast(req)
    except Exception as exc:
        return Result((time.perf_counter() - t0) * 1000.0, 0, "-", False, type(exc).__name__)
    return Result(
        latency_ms=(time.perf_counter() - t0) * 1000.0,
        points=len(resp.points),
        quality=resp.data_quality.value,
        stored=resp.stored,
    )


async def _run_phase(
    service: RevenueForecastService,
    cfg: RunConfig,
    count: int,
    start_idx: int,
) -> list[Result]:
    next_index = start_idx
    lock = asyncio.Lock()
    results: list[Result] = []

    async def worker() -> None:
        nonlocal next_index
        while True:
            async with lock:
                if next_index >= start_idx + count:
                    return
                idx = next_index
                next_index += 1
            results.append(await _one_request(service, cfg, idx))

    workers = [asyncio.create_task(worker()) for _ in range(cfg.concurrency)]
    await asyncio.gather(*workers)
    return results


def _print_summary(cfg: RunConfig, elapsed_s: float, results: list[Result]) -> None:
    latencies = [r.latency_ms for r in results]
    sorted_lat = sorted(latencies)
    qualities = Counter(r.quality for r in results if not r.error)
    errors = Counter(r.error for r in results if r.error)
    success = sum(1 for r in results if not r.error)
    stored = sum(1 for r in results if r.stored)
    rps = len(results) / elapsed_s if elapsed_s > 0 else 0.0

    print("\nForecast benchmark complete")
    print(f"store         : {cfg.database_url}")
    print(f"users         : {cfg.users}")
    print(f"requests      : {len(results)}")
    print(f"concurrency   : {cfg.concurrency}")
    print(f"horizon       : {cfg.horizon_days}d {cfg.granularity.value}")
    print(f"success       : {success}/{len(results)} ({(success/len(results))*100:.1f}%)")
    print(f"stored        : {stored}/{len(results)}")
    print(f"duration      : {elapsed_s:.3f}s")
    print(f"throughput    : {rps:.2f} forecasts/s")
    print(f"latency avg   : {statistics.fmean(latencies):.2f} ms")
    print(f"latency p50   : {_percentile(sorted_lat, 0.50):.2f} ms")
    print(f"latency p95   : {_percentile(sorted_lat, 0.95):.2f} ms")
    print(f"latency p99   : {_percentile(sorted_lat, 0.99):.2f} ms")
    print(f"data quality  : {dict(qualities)}")
    if errors:
        print(f"errors        : {dict(errors.most_common())}")


async def main() -> None:
    cfg = _parse_args()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
    )
    # per-request info logs would dominate the measurement
    logging.getLogger("services.forecast_service").setLevel(logging.WARNING)
    logging.getLogger("store.forecasts").setLevel(logging.WARNING)

    init_database(cfg.database_url)
    init_db()

    today = date.today()
    rng = np.random.default_rng(cfg.seed)
    source = InMemoryRevenueSource({
        _user_id(i): _history(cfg, i, today, rng) for i in range(cfg.users)
    })
    service = RevenueForecastService(
        source,
        ForecastStore(),
        cache=HistoryCache(KeyValueClient(use_redis=False)),
        clock=lambda: today,
        rng=np.random.default_rng(cfg.seed),
    )

    try:
        if cfg.warmup:
            print(f"Running warmup: {cfg.warmup} request(s)...")
            await _run_phase(service, cfg, cfg.warmup, 0)

        print(f"Running measured phase: {cfg.requests} request(s), concurrency={cfg.concurrency}...")
        t0 = time.perf_counter()
        measured = await _run_phase(service, cfg, cfg.requests, cfg.warmup)
        elapsed = time.perf_counter() - t0
    finally:
        await service.aclose()
        dispose_database()

    _print_summary(cfg, elapsed, measured)


if __name__ == "__main__":
    asyncio.run(main())
