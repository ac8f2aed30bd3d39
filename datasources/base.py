"""
Base contract for revenue observation stores

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from engine.enums import Platform
from engine.series.loader import RevenueObservation


class RevenueSource(ABC):
    """Read-only access to time-stamped revenue per user, optionally per platform."""

    @abstractmethod
    async def fetch(
        self,
        user_id: str,
        start: date,
        end: date,
        platform: Optional[Platform] = None,
    ) -> List[RevenueObservation]: ...

    async def aclose(self) -> None:
        return None
