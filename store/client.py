"""
Client code for Redis access, with a per-instance in-memory fallback if Redis is unavailable.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Optional, Tuple

from config import settings

log = logging.getLogger(__name__)


class KeyValueClient:
    """String key/value access with TTLs.

    Connects lazily to Redis. While Redis is unreachable, values live in a
    bounded in-memory map owned by this instance. Entries expire on read and
    the least recently used entry is evicted when the map is full; a new
    connection attempt is made once the retry cooldown elapses.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        use_redis: bool = True,
        max_fallback_items: Optional[int] = None,
        retry_cooldown_seconds: Optional[float] = None,
        op_timeout_seconds: Optional[float] = None,
    ) -> None:
        self.url = url or settings.redis_url
        self.use_redis = use_redis
        self._max_fallback = int(max_fallback_items or settings.store_fallback_max_items)
        self._cooldown = float(
            retry_cooldown_seconds if retry_cooldown_seconds is not None
            else settings.store_redis_retry_cooldown_seconds
        )
        self._op_timeout = float(op_timeout_seconds or settings.store_redis_op_timeout_seconds)
        self._redis: Any = None
        self._fallback: "OrderedDict[str, Tuple[str, Optional[float]]]" = OrderedDict()
        self._using_fallback = False
        self._retry_after_monotonic = 0.0
        self._init_lock = asyncio.Lock()

    @property
    def using_fallback(self) -> bool:
        return self._using_fallback

    async def _client(self) -> Any:
        if not self.use_redis:
            self._using_fallback = True
            return None
        if self._redis is not None:
            return self._redis
        if time.monotonic() < self._retry_after_monotonic:
            self._using_fallback = True
            return None

        async with self._init_lock:
            if self._redis is not None:
                return self._redis
            if time.monotonic() < self._retry_after_monotonic:
                self._using_fallback = True
                return None
            try:
                import redis.asyncio as aioredis

                client = aioredis.from_url(
                    self.url,
                    decode_responses=True,
                    socket_connect_timeout=self._op_timeout,
                    socket_timeout=self._op_timeout,
                )
                await asyncio.wait_for(client.ping(), timeout=self._op_timeout)
                self._redis = client
                self._retry_after_monotonic = 0.0
                self._using_fallback = False
                log.info("Redis connected: %s", self.url)
                return self._redis
            except Exception as exc:
                self._retry_after_monotonic = time.monotonic() + max(0.0, self._cooldown)
                if not self._using_fallback:
                    log.warning("Redis unavailable (%s) - using in-memory fallback", exc)
                    self._using_fallback = True
                return None

    def _fallback_get(self, key: str) -> Optional[str]:
        entry = self._fallback.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            self._fallback.pop(key, None)
            return None
        self._fallback.move_to_end(key)
        return value

    def _sweep_expired(self) -> None:
        now = time.monotonic()
        expired = [k for k, (_, exp) in self._fallback.items() if exp is not None and now >= exp]
        for k in expired:
            del self._fallback[k]

    def _fallback_set(self, key: str, value: str, ttl: Optional[int]) -> None:
        if key in self._fallback:
            self._fallback.move_to_end(key)
        elif len(self._fallback) >= self._max_fallback:
            self._sweep_expired()
            # least recently used first
            while len(self._fallback) >= self._max_fallback:
                self._fallback.popitem(last=False)
        expires_at = time.monotonic() + ttl if ttl else None
        self._fallback[key] = (value, expires_at)

    async def get(self, key: str) -> Optional[str]:
        client = await self._client()
        if client is None:
            return self._fallback_get(key)
        try:
            return await asyncio.wait_for(client.get(key), timeout=self._op_timeout)
        except Exception as exc:
            log.debug("Redis GET error %s: %s", key, exc)
            return self._fallback_get(key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        client = await self._client()
        if client is None:
            self._fallback_set(key, value, ttl)
            return
        try:
            if ttl:
                await asyncio.wait_for(client.setex(key, ttl, value), timeout=self._op_timeout)
            else:
                await asyncio.wait_for(client.set(key, value), timeout=self._op_timeout)
        except Exception as exc:
            log.debug("Redis SET error %s: %s", key, exc)
            self._fallback_set(key, value, ttl)

    async def delete(self, key: str) -> None:
        client = await self._client()
        if client is None:
            self._fallback.pop(key, None)
            return
        try:
            await asyncio.wait_for(client.delete(key), timeout=self._op_timeout)
        except Exception as exc:
            log.debug("Redis DEL error %s: %s", key, exc)
            self._fallback.pop(key, None)

    async def aclose(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
