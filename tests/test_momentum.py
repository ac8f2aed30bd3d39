import pytest

from engine.momentum import NEUTRAL, estimate, momentum_factor


def test_ratio_of_last_week_to_previous_week():
    vals = [100.0] * 7 + [120.0] * 7
    assert estimate(vals) == pytest.approx(1.2)


def test_only_trailing_fourteen_points_matter():
    vals = [999.0] * 30 + [50.0] * 7 + [25.0] * 7
    assert estimate(vals) == pytest.approx(0.5)


def test_neutral_when_history_is_short():
    assert estimate([100.0] * 13) == NEUTRAL


def test_neutral_when_previous_week_is_zero():
    assert estimate([0.0] * 7 + [10.0] * 7) == NEUTRAL


def test_factor_decays_toward_neutral():
    assert momentum_factor(0, 1.5) == pytest.approx(1.5)
    assert momentum_factor(30, 1.5) == pytest.approx(1.0 + 0.5 * 0.95)
    near, far = momentum_factor(10, 1.5), momentum_factor(300, 1.5)
    assert 1.0 < far < near < 1.5


def test_neutral_momentum_stays_neutral():
    for days in (0, 1, 90, 730):
        assert momentum_factor(days, 1.0) == 1.0
