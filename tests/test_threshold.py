import pytest

from cwdsp.threshold import Threshold


def run(t, env):
    return [t.push(e) for e in env]


def test_follows_simple_on_off_pattern():
    t = Threshold(100.0, 1.0, 0.01)
    env = [1.0] * 20 + [0.0] * 20 + [1.0] * 20
    out = run(t, env)
    assert out[10] is True
    assert out[30] is False
    assert out[50] is True


def test_hysteresis_prevents_mid_threshold_chatter():
    t = Threshold(100.0, 1.0, 0.01)
    for _ in range(50):
        t.push(1.0)
    t.push(0.0)
    for _ in range(20):
        assert t.push(0.45) is False


def test_silence_does_not_flip_on():
    t = Threshold(100.0, 1.0, 0.01)
    assert not any(t.push(0.0) for _ in range(1_000))


def test_peak_never_decays_below_min_peak():
    t = Threshold(100.0, 0.1, 0.02)
    t.push(1.0)
    for _ in range(500):
        t.push(0.0)
    assert t.peak == pytest.approx(0.02)


def test_peak_halves_after_half_life():
    t = Threshold(100.0, 1.0, 0.0)
    t.push(1.0)
    for _ in range(100):
        t.push(0.0)
    assert t.peak == pytest.approx(0.5, rel=1e-6)


def test_absolute_on_floor_rejects_weak_envelope():
    t = Threshold(100.0, 1.0, 0.005).with_absolute_on_floor(0.08)
    assert not any(t.push(0.05) for _ in range(100))
    assert t.push(0.5) is True


def test_custom_hysteresis_raises_on_threshold():
    t = Threshold(100.0, 1.0, 0.01).with_hysteresis(0.9, 0.1)
    for _ in range(50):
        t.push(1.0)
    t.push(0.0)
    assert t.push(0.6) is False
    assert t.push(0.95) is True


def test_invalid_hysteresis_rejected():
    with pytest.raises(ValueError):
        Threshold(100.0, 1.0, 0.01).with_hysteresis(0.3, 0.5)
    with pytest.raises(ValueError):
        Threshold(100.0, 1.0, 0.01).with_hysteresis(0.5, 0.0)


@pytest.mark.parametrize("args", [(0.0, 1.0, 0.0), (100.0, 0.0, 0.0), (100.0, 1.0, -0.1)])
def test_invalid_construction_rejected(args):
    with pytest.raises(ValueError):
        Threshold(*args)


def test_negative_floor_rejected():
    with pytest.raises(ValueError):
        Threshold(100.0, 1.0, 0.01).with_absolute_on_floor(-1.0)