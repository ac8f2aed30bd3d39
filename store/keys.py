"""
Cache key layout for the key/value store.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import hashlib
from datetime import date
from typing import Optional


def _slug(value: str) -> str:
    # Internal cache keys do not require reversibility; use strong stable hashing.
    return hashlib.sha256(value.encode()).hexdigest()[:32]


def history(user_id: str, platform: Optional[str], start: date, end: date) -> str:
    scope = platform or "all"
    return f"rf:{_slug(user_id)}:history:{scope}:{start.isoformat()}:{end.isoformat()}"
