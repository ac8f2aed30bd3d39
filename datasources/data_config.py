"""
Settings for the revenue observation store backend

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings
from config import (
    OBSERVATION_BACKEND_HTTP,
    OBSERVATION_BACKEND_SQL,
    REVCAST_CONNECTOR_TIMEOUT,
    REVCAST_OBSERVATION_BACKEND,
    REVCAST_OBSERVATION_HTTP_URL,
)


class DataSourceSettings(BaseSettings):
    observation_backend: str = REVCAST_OBSERVATION_BACKEND
    observation_http_url: str = REVCAST_OBSERVATION_HTTP_URL
    connector_timeout: int = REVCAST_CONNECTOR_TIMEOUT

    @field_validator("observation_http_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return str(v).rstrip("/")

    @field_validator("observation_backend", mode="before")
    @classmethod
    def validate_observation_backend(cls, v: str) -> str:
        value = str(v or "").strip().lower()
        if value not in {OBSERVATION_BACKEND_SQL, OBSERVATION_BACKEND_HTTP}:
            raise ValueError(f"Unsupported observation backend: {value!r}")
        return value

    model_config = {"env_prefix": "REVCAST_", "extra": "ignore"}
