"""Hysteretic envelope slicer turning an envelope into key-up / key-down."""

from __future__ import annotations

import copy

DEFAULT_ON_FRACTION = 0.55
"""Fraction of the peak above which the slicer switches to key-down."""

DEFAULT_OFF_FRACTION = 0.35
"""Fraction of the peak below which the slicer switches to key-up."""


class Threshold:
    """Envelope slicer with a decaying peak tracker and on/off hysteresis.

    ``min_peak`` is a noise-floor guard: the peak never decays below it, so
    silence never flips the slicer on.
    """

    def __init__(self, envelope_sample_rate_hz: float, peak_half_life_s: float, min_peak: float) -> None:
        if envelope_sample_rate_hz <= 0.0:
            raise ValueError("envelope_sample_rate_hz must be positive")
        if peak_half_life_s <= 0.0:
            raise ValueError("peak_half_life_s must be positive")
        if min_peak < 0.0:
            raise ValueError("min_peak must be non-negative")

        half_life_samples = peak_half_life_s * envelope_sample_rate_hz
        self._decay_per_sample = 0.5 ** (1.0 / half_life_samples)
        self._peak = min_peak
        self._min_peak = min_peak
        self._on_fraction = DEFAULT_ON_FRACTION
        self._off_fraction = DEFAULT_OFF_FRACTION
        self._absolute_on_floor = 0.0
        self._state = False

    def with_absolute_on_floor(self, floor: float) -> Threshold:
        """Return a slicer that never turns on while the envelope is below ``floor``."""
        if floor < 0.0:
            raise ValueError("floor must be non-negative")
        result = copy.copy(self)
        result._absolute_on_floor = floor
        return result

    def with_hysteresis(self, on_fraction: float, off_fraction: float) -> Threshold:
        """Return a slicer with different on/off fractions of the peak."""
        if on_fraction <= off_fraction:
            raise ValueError("on_fraction must be greater than off_fraction")
        if off_fraction <= 0.0:
            raise ValueError("off_fraction must be positive")
        result = copy.copy(self)
        result._on_fraction = on_fraction
        result._off_fraction = off_fraction
        return result

    @property
    def peak(self) -> float:
        """Current peak estimate."""
        return self._peak

    def push(self, envelope: float) -> bool:
        """Feed one envelope sample and return the key state (True = mark)."""
        if envelope > self._peak:
            self._peak = envelope
        else:
            self._peak = max(self._peak * self._decay_per_sample, self._min_peak)

        on_thresh = max(self._peak * self._on_fraction, self._absolute_on_floor)
        off_thresh = self._peak * self._off_fraction

        if self._state:
            if envelope < off_thresh or envelope < self._absolute_on_floor * 0.5:
                self._state = False
        elif envelope > on_thresh:
            self._state = True
        return self._state