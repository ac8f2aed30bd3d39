"""
Errors raised by revenue observation stores.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""


class DataSourceError(Exception):
    pass


class DataSourceUnavailable(DataSourceError):
    pass


class QueryTimeout(DataSourceError):
    pass


class InvalidQuery(DataSourceError):
    pass


class InvalidPayload(DataSourceError):
    pass


# transient failures worth retrying at the connector
TRANSIENT_ERRORS = (DataSourceUnavailable, QueryTimeout)
