"""
Factory for creating the revenue observation store based on configuration.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from connectors.http import HttpRevenueSource
from connectors.sql import SqlRevenueSource


class DataSourceFactory:

    @staticmethod
    def create_revenue_source(config):
        from config import OBSERVATION_BACKEND_HTTP, OBSERVATION_BACKEND_SQL

        if config.observation_backend == OBSERVATION_BACKEND_SQL:
            return SqlRevenueSource()
        if config.observation_backend == OBSERVATION_BACKEND_HTTP:
            return HttpRevenueSource(config.observation_http_url, timeout=config.connector_timeout)
        raise ValueError("Unsupported observation backend")
