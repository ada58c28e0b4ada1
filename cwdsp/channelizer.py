"""Uniform-grid FFT channelizer over real-valued audio.

Input samples go into an ``fft_size``-long ring buffer. Every ``hop``
samples, once the buffer has filled, the most recent ``fft_size`` samples
are windowed with a Hann window and transformed. The positive half of the
spectrum (bins ``0..=fft_size // 2``) is emitted as complex values at a
decimated rate of ``sample_rate / hop``.

Output is scaled so that a unit-amplitude sine on a bin centre gives
``|z|`` of about 0.5 on that bin, the same convention as the Goertzel
detector.
"""

from __future__ import annotations

import math

import numpy as np


def _hann(n: int) -> np.ndarray:
    """Symmetric Hann window of length ``n``."""
    phase = 2.0 * math.pi * np.arange(n, dtype=np.float64) / (n - 1)
    return 0.5 * (1.0 - np.cos(phase))


class FftChannelizer:
    """Split a real sample stream into ``fft_size // 2 + 1`` uniform sub-bands."""

    def __init__(self, fft_size: int, hop: int, sample_rate_hz: float) -> None:
        if fft_size < 2:
            raise ValueError("fft_size must be at least 2")
        if hop <= 0:
            raise ValueError("hop must be positive")
        if hop > fft_size:
            raise ValueError(f"hop ({hop}) must be <= fft_size ({fft_size})")
        if not sample_rate_hz > 0.0:
            raise ValueError("sample_rate_hz must be positive")

        self._fft_size = fft_size
        self._hop = hop
        self._sample_rate = float(sample_rate_hz)
        self._window = _hann(fft_size)
        self._norm = 1.0 / float(self._window.sum())
        self._ring = np.zeros(fft_size, dtype=np.float64)
        self._write_idx = 0
        self._filled = 0
        self._samples_since_emit = 0
        self._emitted_once = False

    @property
    def channel_count(self) -> int:
        """Number of output bins, DC and Nyquist included."""
        return self._fft_size // 2 + 1

    @property
    def fft_size(self) -> int:
        """Input samples per FFT frame."""
        return self._fft_size

    @property
    def hop(self) -> int:
        """Input samples between successive frames."""
        return self._hop

    @property
    def bin_spacing_hz(self) -> float:
        """Spacing between bin centres in Hz."""
        return self._sample_rate / self._fft_size

    @property
    def output_sample_rate(self) -> float:
        """Frames emitted per second."""
        return self._sample_rate / self._hop

    def bin_frequency(self, idx: int) -> float:
        """Centre frequency of bin ``idx`` in Hz."""
        if not 0 <= idx < self.channel_count:
            raise IndexError("bin index out of range")
        return idx * self.bin_spacing_hz

    def bin_index_for(self, freq_hz: float) -> int:
        """Nearest bin index for ``freq_hz``, clamped to the valid range."""
        top = self.channel_count - 1
        raw = freq_hz / self.bin_spacing_hz
        if not raw >= 0.0:
            return 0
        if math.isinf(raw):
            return top
        return min(int(math.floor(raw + 0.5)), top)

    def push(self, sample: float) -> np.ndarray | None:
        """Feed one sample; return the complex half-spectrum when a frame is ready."""
        self._ring[self._write_idx] = sample
        self._write_idx = (self._write_idx + 1) % self._fft_size
        if self._filled < self._fft_size:
            self._filled += 1
        self._samples_since_emit += 1

        if self._emitted_once:
            ready = self._samples_since_emit >= self._hop
        else:
            ready = self._filled >= self._fft_size
        if not ready:
            return None

        frame = np.concatenate((self._ring[self._write_idx:], self._ring[: self._write_idx]))
        bins = np.fft.rfft(frame * self._window) * self._norm

        self._samples_since_emit = 0
        self._emitted_once = True
        return bins