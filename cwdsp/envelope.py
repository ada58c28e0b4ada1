"""Narrow-band envelope detection with a single-bin Goertzel filter."""

from __future__ import annotations

import math


class Goertzel:
    """Single-bin Goertzel filter producing one magnitude per block.

    The envelope stream runs at ``sample_rate_hz / block_len``. Magnitudes
    are normalised by the block length, so a unit-amplitude sine on the
    target bin yields roughly 0.5.
    """

    def __init__(self, target_freq_hz: float, sample_rate_hz: float, block_len: int) -> None:
        if target_freq_hz <= 0.0:
            raise ValueError("target_freq_hz must be positive")
        if sample_rate_hz <= 0.0:
            raise ValueError("sample_rate_hz must be positive")
        if block_len < 1:
            raise ValueError("block_len must be at least 1")

        cycles = block_len * target_freq_hz / sample_rate_hz
        if cycles < 1.0:
            raise ValueError(
                f"block_len ({block_len}) must span at least one cycle of "
                f"target ({target_freq_hz} Hz) at sample rate {sample_rate_hz} Hz"
            )
        w = 2.0 * math.pi * cycles / block_len
        self._coeff = 2.0 * math.cos(w)
        self._block_len = block_len
        self._s1 = 0.0
        self._s2 = 0.0
        self._n = 0

    @property
    def block_len(self) -> int:
        """Block size, in input samples, between envelope outputs."""
        return self._block_len

    def push(self, sample: float) -> float | None:
        """Feed one sample; return the block magnitude at each block end, else None."""
        s = sample + self._coeff * self._s1 - self._s2
        self._s2 = self._s1
        self._s1 = s
        self._n += 1
        if self._n < self._block_len:
            return None
        power = self._s1 * self._s1 + self._s2 * self._s2 - self._coeff * self._s1 * self._s2
        magnitude = math.sqrt(max(power, 0.0)) / self._block_len
        self._s1 = 0.0
        self._s2 = 0.0
        self._n = 0
        return magnitude