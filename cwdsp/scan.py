"""Occupied-bin detection from FFT channelizer magnitudes.

A calibration window of per-frame bin magnitudes is accumulated in a
:class:`BinStats`. :meth:`BinStats.detect` then picks the bins that look
like keyed CW signals:

- The noise floor is the median, over the search range, of the per-bin
  peak and of the per-bin standard deviation. This holds as long as most
  bins in range are unoccupied.
- A bin is a candidate when its peak clears the noise-floor peak by the
  configured SNR and its standard deviation clears the noise-floor
  deviation by ``variance_ratio``. The second test rejects steady
  carriers, whose envelope barely moves.
- Candidates are non-max-suppressed, strongest first, so one signal whose
  main lobe spans a few bins is reported once.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np


@dataclass
class ScanConfig:
    """Settings for :meth:`BinStats.detect`."""

    peak_snr_db: float = 12.0
    """Minimum peak-to-noise-floor ratio in dB."""
    variance_ratio: float = 3.0
    """Multiplier on the noise-floor standard deviation."""
    nms_radius: int = 3
    """Candidates within this many bins of a stronger pick are dropped."""
    dominance_radius: int = 16
    """Within this radius, candidates far weaker than a pick are dropped."""
    dominance_db: float = 20.0
    """How much weaker (dB) a candidate must be to count as a sideband."""
    max_channels: int = 32
    """Cap on the number of bins returned."""
    min_bin: int = 1
    """First bin considered (inclusive); 1 skips DC."""
    max_bin: int | None = None
    """Last bin considered (exclusive); None means every bin."""


def median(values: Sequence[float]) -> float:
    """Upper median of ``values``; 0.0 for an empty sequence."""
    ordered = sorted(float(v) for v in values)
    if not ordered:
        return 0.0
    return ordered[len(ordered) // 2]


class BinStats:
    """Running peak, mean and standard deviation of per-bin magnitudes."""

    def __init__(self, n_bins: int) -> None:
        if n_bins <= 0:
            raise ValueError("n_bins must be positive")
        self._n_bins = n_bins
        self._frames = 0
        self._peak = np.zeros(n_bins, dtype=np.float64)
        self._sum = np.zeros(n_bins, dtype=np.float64)
        self._sum_sq = np.zeros(n_bins, dtype=np.float64)

    @property
    def bin_count(self) -> int:
        """Number of bins covered."""
        return self._n_bins

    @property
    def frames(self) -> int:
        """Number of frames observed so far."""
        return self._frames

    def observe(self, mags: Sequence[float]) -> None:
        """Add one frame of magnitudes, one per bin."""
        frame = np.asarray(mags, dtype=np.float64)
        if frame.shape != (self._n_bins,):
            raise ValueError("frame width mismatch")
        self._frames += 1
        np.maximum(self._peak, frame, out=self._peak)
        self._sum += frame
        self._sum_sq += frame * frame

    def peak(self, bin: int) -> float:
        """Largest magnitude seen in ``bin``."""
        return float(self._peak[self._check(bin)])

    def mean(self, bin: int) -> float:
        """Mean magnitude of ``bin``, or 0.0 before any frame."""
        idx = self._check(bin)
        if self._frames == 0:
            return 0.0
        return float(self._sum[idx] / self._frames)

    def stddev(self, bin: int) -> float:
        """Population standard deviation of ``bin``, or 0.0 before any frame."""
        idx = self._check(bin)
        if self._frames == 0:
            return 0.0
        return float(self._stddevs()[idx])

    def detect(self, cfg: ScanConfig | None = None) -> list[int]:
        """Return the occupied bins, in ascending order."""
        cfg = cfg if cfg is not None else ScanConfig()
        min_bin = min(cfg.min_bin, self._n_bins)
        max_bin = min(self._n_bins if cfg.max_bin is None else cfg.max_bin, self._n_bins)
        if self._frames == 0 or min_bin >= max_bin:
            return []

        peaks = self._peak[min_bin:max_bin]
        stds = self._stddevs()[min_bin:max_bin]
        peak_thresh = median(peaks) * 10.0 ** (cfg.peak_snr_db / 20.0)
        std_thresh = median(stds) * cfg.variance_ratio

        candidates = [
            (float(p), bin_idx)
            for bin_idx, p, s in zip(range(min_bin, max_bin), peaks, stds)
            if p > peak_thresh and s > std_thresh
        ]
        candidates.sort(key=lambda c: c[0], reverse=True)

        dominance_ratio = 10.0 ** (cfg.dominance_db / 20.0)
        picked: list[tuple[int, float]] = []
        for peak, bin_idx in candidates:
            if len(picked) >= cfg.max_channels:
                break
            suppressed = any(
                abs(pbin - bin_idx) <= cfg.nms_radius
                or (abs(pbin - bin_idx) <= cfg.dominance_radius and ppeak > peak * dominance_ratio)
                for pbin, ppeak in picked
            )
            if not suppressed:
                picked.append((bin_idx, peak))
        return sorted(b for b, _ in picked)

    def _stddevs(self) -> np.ndarray:
        n = float(self._frames)
        mean = self._sum / n
        var = self._sum_sq / n - mean * mean
        return np.sqrt(np.maximum(var, 0.0))

    def _check(self, bin: int) -> int:
        if not 0 <= bin < self._n_bins:
            raise IndexError("bin index out of range")
        return bin