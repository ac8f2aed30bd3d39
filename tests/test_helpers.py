"""
Test Suite for Helper Functions

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datetime import date

import pytest
import httpx

from datasources.helpers import fetch_json, parse_observations
from datasources.exceptions import DataSourceUnavailable, InvalidPayload, InvalidQuery, QueryTimeout
from engine.enums import Platform


class DummyResponse:
    def __init__(self, status_code=200, text="", json_data=None):
        self.status_code = status_code
        self.text = text
        self._json = json_data or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise httpx.HTTPStatusError("err", request=None, response=self)

    def json(self):
        return self._json


class DummyClient:
    def __init__(self, resp=None, exc=None):
        self.resp = resp
        self.exc = exc
        self.calls = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def get(self, url, params=None, headers=None):
        self.calls.append((url, params, headers))
        if self.exc is not None:
            raise self.exc
        return self.resp


@pytest.mark.asyncio
async def test_fetch_json_success(monkeypatch):
    resp = DummyResponse(status_code=200, json_data={"foo": "bar"})
    monkeypatch.setattr(httpx, "AsyncClient", lambda timeout: DummyClient(resp))
    got = await fetch_json("url", params={"a": 1}, headers={})
    assert got == {"foo": "bar"}


@pytest.mark.asyncio
async def test_fetch_json_http_error(monkeypatch):
    resp = DummyResponse(status_code=404, text="not found")
    monkeypatch.setattr(httpx, "AsyncClient", lambda timeout: DummyClient(resp))
    with pytest.raises(InvalidQuery):
        await fetch_json("url")


@pytest.mark.asyncio
async def test_fetch_json_timeout(monkeypatch):
    client = DummyClient(exc=httpx.ReadTimeout("slow"))
    monkeypatch.setattr(httpx, "AsyncClient", lambda timeout: client)
    with pytest.raises(QueryTimeout):
        await fetch_json("url")


@pytest.mark.asyncio
async def test_fetch_json_unreachable(monkeypatch):
    client = DummyClient(exc=httpx.ConnectError("refused"))
    monkeypatch.setattr(httpx, "AsyncClient", lambda timeout: client)
    with pytest.raises(DataSourceUnavailable):
        await fetch_json("url")


def test_parse_observations():
    payload = {"observations": [
        {"date": "2026-03-01", "revenue": 12.5, "platform": "spotify"},
        {"date": "2026-03-02T00:00:00Z", "revenue": "-4"},
    ]}
    obs = parse_observations(payload)
    assert obs[0].date == date(2026, 3, 1)
    assert obs[0].platform == Platform.spotify
    assert obs[0].value == 12.5
    assert obs[1].date == date(2026, 3, 2)
    assert obs[1].platform is None
    assert obs[1].value == 0.0


@pytest.mark.parametrize("payload", [
    {},
    {"observations": "nope"},
    {"observations": [{"revenue": 1}]},
    {"observations": [{"date": "2026-03-01", "revenue": 1, "platform": "myspace"}]},
])
def test_parse_observations_rejects_malformed(payload):
    with pytest.raises(InvalidPayload):
        parse_observations(payload)
