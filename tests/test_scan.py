import pytest

from cwdsp.scan import BinStats, ScanConfig, median

_MASK = (1 << 64) - 1


def rng(seed: int) -> float:
    x = (seed * 6_364_136_223_846_793_005 + 1) & _MASK
    x ^= x >> 33
    x = (x * 0xFF51_AFD7_ED55_8CCD) & _MASK
    x ^= x >> 33
    return (x & 0x00FF_FFFF) / 0x00FF_FFFF


def stats_from(n_bins, n_frames, per_bin):
    stats = BinStats(n_bins)
    for i in range(n_frames):
        stats.observe([per_bin(i, b) for b in range(n_bins)])
    return stats


def noise(frame, bin, scale=0.05):
    return scale * rng(frame * 131 + bin)


def test_detects_keyed_bin_against_noise():
    def f(frame, bin):
        n = noise(frame, bin)
        if bin == 42 and (frame // 20) % 2 == 0:
            return 1.0 + n
        return n

    stats = stats_from(128, 400, f)
    assert stats.detect(ScanConfig()) == [42]


def test_detects_multiple_keyed_bins():
    def f(frame, bin):
        n = noise(frame, bin)
        on_a = bin == 20 and (frame // 15) % 2 == 0
        on_b = bin == 90 and (frame // 25) % 2 == 0
        return 1.0 + n if on_a or on_b else n

    stats = stats_from(128, 400, f)
    assert stats.detect(ScanConfig()) == [20, 90]


def test_nms_collapses_adjacent_peaks():
    def f(frame, bin):
        n = noise(frame, bin)
        if (frame // 20) % 2 != 0:
            return n
        return {50: 0.4, 51: 1.0, 52: 0.3}.get(bin, 0.0) + n

    stats = stats_from(128, 400, f)
    assert stats.detect(ScanConfig()) == [51]


def test_steady_carrier_rejected_by_variance_check():
    def f(frame, bin):
        n = noise(frame, bin)
        if bin == 30:
            return 1.0 + n
        if bin == 60 and (frame // 15) % 2 == 0:
            return 1.0 + n
        return n

    stats = stats_from(128, 400, f)
    assert stats.detect(ScanConfig()) == [60]


def test_min_bin_max_bin_filter_search_range():
    def f(frame, bin):
        n = noise(frame, bin)
        on = (frame // 20) % 2 == 0
        if bin in (5, 64, 120) and on:
            return 1.0 + n
        return n

    stats = stats_from(128, 400, f)
    cfg = ScanConfig(min_bin=10, max_bin=100)
    assert stats.detect(cfg) == [64]


def test_max_channels_caps_the_result():
    strongest = {10, 30, 50, 70, 90}
    weaker = {15, 35, 55, 75, 95}

    def f(frame, bin):
        n = noise(frame, bin)
        if (frame // 20) % 2 != 0:
            return n
        if bin in strongest:
            return 1.0 + n
        if bin in weaker:
            return 0.5 + n
        return n

    stats = stats_from(128, 400, f)
    picked = stats.detect(ScanConfig(max_channels=3))
    assert len(picked) == 3
    assert set(picked) <= strongest


def test_no_frames_yields_no_detections():
    assert BinStats(128).detect(ScanConfig()) == []


def test_detect_without_config_uses_defaults():
    assert BinStats(16).detect() == []


def test_dominance_rejects_distant_sideband_of_stronger_signal():
    def f(frame, bin):
        n = noise(frame, bin, 0.02)
        if (frame // 20) % 2 != 0:
            return n
        return {40: 1.0, 55: 0.03, 80: 0.1}.get(bin, 0.0) + n

    stats = stats_from(256, 400, f)
    assert stats.detect(ScanConfig()) == [40, 80]


def test_pure_noise_yields_no_detections():
    stats = stats_from(128, 400, lambda frame, bin: noise(frame, bin, 0.1))
    assert stats.detect(ScanConfig()) == []


def test_empty_search_range_yields_nothing():
    stats = stats_from(8, 10, lambda frame, bin: float(frame % 2))
    assert stats.detect(ScanConfig(min_bin=5, max_bin=5)) == []


def test_statistics_of_simple_frames():
    stats = BinStats(2)
    stats.observe([1.0, 2.0])
    stats.observe([3.0, 2.0])
    assert stats.frames == 2
    assert stats.bin_count == 2
    assert stats.peak(0) == pytest.approx(3.0)
    assert stats.mean(0) == pytest.approx(2.0)
    assert stats.stddev(0) == pytest.approx(1.0)
    assert stats.stddev(1) == pytest.approx(0.0)


def test_mean_and_stddev_zero_before_frames():
    stats = BinStats(4)
    assert stats.mean(2) == 0.0
    assert stats.stddev(2) == 0.0
    assert stats.peak(2) == 0.0


def test_frame_width_mismatch_raises():
    stats = BinStats(4)
    with pytest.raises(ValueError, match="frame width mismatch"):
        stats.observe([0.0, 1.0])


def test_zero_bins_rejected():
    with pytest.raises(ValueError, match="n_bins"):
        BinStats(0)


def test_out_of_range_bin_raises():
    stats = BinStats(4)
    with pytest.raises(IndexError):
        stats.peak(4)


def test_default_config_values():
    cfg = ScanConfig()
    assert (cfg.peak_snr_db, cfg.variance_ratio, cfg.nms_radius) == (12.0, 3.0, 3)
    assert (cfg.dominance_radius, cfg.dominance_db, cfg.max_channels) == (16, 20.0, 32)
    assert (cfg.min_bin, cfg.max_bin) == (1, None)


@pytest.mark.parametrize(
    ("values", "expected"),
    [([], 0.0), ([5.0], 5.0), ([3.0, 1.0, 2.0], 2.0), ([4.0, 1.0, 3.0, 2.0], 3.0)],
)
def test_median(values, expected):
    assert median(values) == expected