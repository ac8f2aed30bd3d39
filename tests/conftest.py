import os
import sys
from datetime import date, timedelta
from typing import List, Optional, Sequence

import numpy as np
import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from connectors.memory import InMemoryRevenueSource
from database import dispose_database, init_database, init_db
from engine.enums import Platform
from engine.series import RevenueObservation
from services.forecast_service import RevenueForecastService
from store.client import KeyValueClient
from store.forecasts import ForecastStore
from store.history import HistoryCache

TODAY = date(2026, 3, 10)


def daily(
    values: Sequence[float],
    end: date = TODAY,
    platform: Optional[Platform] = None,
) -> List[RevenueObservation]:
    """One observation per day, the last one falling on ``end``."""
    n = len(values)
    return [
        RevenueObservation(date=end - timedelta(days=n - 1 - i), value=float(v), platform=platform)
        for i, v in enumerate(values)
    ]


@pytest.fixture
def db(tmp_path):
    """Fresh SQLite database per test, with every table created."""
    dispose_database()
    init_database(f"sqlite:///{tmp_path / 'revcast.db'}")
    init_db()
    yield
    dispose_database()


@pytest.fixture
def source():
    return InMemoryRevenueSource()


@pytest.fixture
def kv():
    return KeyValueClient(use_redis=False)


@pytest.fixture
def forecast_store(db):
    return ForecastStore()


@pytest.fixture
def service(source, forecast_store, kv):
    return RevenueForecastService(
        source,
        forecast_store,
        cache=HistoryCache(kv),
        clock=lambda: TODAY,
        rng=np.random.default_rng(1),
    )


# Prevent pytest from attempting to collect any modules inside the engine
# package itself.

def pytest_ignore_collect(collection_path, config):
    if os.path.sep + "engine" + os.path.sep in str(collection_path):
        return True
    return None
