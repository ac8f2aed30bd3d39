import hashlib
from datetime import date

from store import keys


def test_slug_consistency():
    v = "user-1"
    assert keys._slug(v) == hashlib.sha256(v.encode()).hexdigest()[:32]


def test_history_key_format():
    start, end = date(2026, 1, 1), date(2026, 3, 1)
    slug = keys._slug("u1")
    assert keys.history("u1", None, start, end) == f"rf:{slug}:history:all:2026-01-01:2026-03-01"
    assert keys.history("u1", "spotify", start, end) == f"rf:{slug}:history:spotify:2026-01-01:2026-03-01"


def test_history_keys_differ_per_user_and_window():
    start, end = date(2026, 1, 1), date(2026, 3, 1)
    assert keys.history("a", None, start, end) != keys.history("b", None, start, end)
    assert keys.history("a", None, start, end) != keys.history("a", None, start, date(2026, 3, 2))
