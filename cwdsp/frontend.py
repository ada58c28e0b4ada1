"""Envelope front ends and parameter selection for a CW decoding pipeline.

Two front ends turn raw audio into one envelope sample per channel: a bank
of Goertzel filters tuned to known tones, or an FFT channelizer whose
nearest bins stand in for the tones. Helpers pick block, FFT and hop sizes
from the sample rate and keying speed, and :func:`scan_for_tones` finds
keyed CW signals in a calibration window of audio.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import replace

import numpy as np

from cwdsp.bank import GoertzelBank
from cwdsp.channelizer import FftChannelizer
from cwdsp.scan import BinStats, ScanConfig

MIN_BLOCK_LEN = 16
"""Smallest Goertzel block length ever selected automatically."""

DEFAULT_BLOCK_CYCLES = 4.0
"""Automatic Goertzel blocks span about this many cycles of the lowest tone."""

DEFAULT_MULTI_ON_FLOOR = 0.08
"""Absolute slicer floor suggested for multi-channel decoding."""

TARGET_SAMPLES_PER_DIT = 10.0
"""Automatic hop sizes aim for this many envelope samples per dit."""

MIN_AUTO_FFT_SIZE = 128
"""Smallest FFT size selected automatically."""

MAX_AUTO_FFT_SIZE = 4096
"""Largest FFT size selected automatically."""


def _dit_seconds(wpm: float) -> float:
    if not wpm > 0.0:
        raise ValueError("wpm must be positive")
    return 1.2 / wpm


def prev_pow2(n: int) -> int:
    """Largest power of two not above ``n``; 1 for ``n < 2``."""
    if n < 2:
        return 1
    return 1 << (n.bit_length() - 1)


def auto_fft_size(sample_rate: float, wpm: float) -> int:
    """Largest power-of-two FFT size whose window fits in one dit, clamped."""
    raw = sample_rate * _dit_seconds(wpm)
    cap = int(raw) if raw >= 1.0 else 1
    return min(max(prev_pow2(cap), MIN_AUTO_FFT_SIZE), MAX_AUTO_FFT_SIZE)


def auto_hop(sample_rate: float, wpm: float, fft_size: int) -> int:
    """Hop size giving about ten envelope samples per dit, within ``[1, fft_size // 2]``."""
    if fft_size < 2:
        raise ValueError("fft_size must be at least 2")
    raw = math.floor(sample_rate * _dit_seconds(wpm) / TARGET_SAMPLES_PER_DIT)
    hop = int(raw) if raw >= 1.0 else 1
    return max(1, min(hop, fft_size // 2))


def auto_block_len(sample_rate: float, tones: Iterable[float]) -> int:
    """Goertzel block length spanning a few cycles of the lowest tone."""
    tone_list = [float(t) for t in tones]
    if not tone_list:
        raise ValueError("at least one tone is required")
    lowest = min(tone_list)
    if not lowest > 0.0:
        raise ValueError("tones must be positive")
    raw = math.floor(DEFAULT_BLOCK_CYCLES * sample_rate / lowest + 0.5)
    return max(int(raw), MIN_BLOCK_LEN)


class GoertzelBackend:
    """Envelope front end built on a bank of tuned Goertzel filters."""

    def __init__(self, sample_rate: float, tones: Sequence[float], block_len: int) -> None:
        self._bank = GoertzelBank(tones, sample_rate, block_len)
        self._tones = tuple(float(t) for t in tones)
        self._env_rate = sample_rate / block_len

    @property
    def channel_count(self) -> int:
        """Number of channels."""
        return len(self._tones)

    @property
    def envelope_sample_rate(self) -> float:
        """Envelope frames per second."""
        return self._env_rate

    def push(self, sample: float) -> list[float] | None:
        """Feed one sample; return one envelope per channel when a frame is ready."""
        envs = self._bank.push(sample)
        return None if envs is None else list(envs)

    def labels(self) -> list[str]:
        """Human-readable channel labels, one per tone."""
        return [f"{t:>6.0f} Hz" for t in self._tones]


class FftBackend:
    """Envelope front end that reads the FFT bins nearest each tone."""

    def __init__(self, fft_size: int, hop: int, sample_rate: float, tones: Sequence[float]) -> None:
        self._channelizer = FftChannelizer(fft_size, hop, sample_rate)
        self._bins = [self._channelizer.bin_index_for(t) for t in tones]
        self._frequencies = [self._channelizer.bin_frequency(b) for b in self._bins]

    @property
    def bins(self) -> list[int]:
        """Bin index used for each channel."""
        return list(self._bins)

    @property
    def frequencies(self) -> list[float]:
        """Centre frequency of each channel's bin, in Hz."""
        return list(self._frequencies)

    @property
    def channel_count(self) -> int:
        """Number of channels."""
        return len(self._bins)

    @property
    def envelope_sample_rate(self) -> float:
        """Envelope frames per second."""
        return self._channelizer.output_sample_rate

    def push(self, sample: float) -> list[float] | None:
        """Feed one sample; return one envelope per channel when a frame is ready."""
        frame = self._channelizer.push(sample)
        if frame is None:
            return None
        return [float(abs(frame[b])) for b in self._bins]

    def labels(self) -> list[str]:
        """Human-readable channel labels showing the actual bin frequencies."""
        return [f"{f:>6.1f} Hz" for f in self._frequencies]


def scan_for_tones(
    samples: Iterable[float],
    sample_rate: float,
    fft_size: int,
    hop: int,
    cfg: ScanConfig | None = None,
    min_freq: float = 300.0,
    max_freq: float = 3000.0,
) -> list[float]:
    """Detect keyed CW signals in ``samples``; return their bin frequencies in ascending order.

    The search is restricted to bins between ``min_freq`` and ``max_freq``
    (DC is always skipped); other detection settings come from ``cfg``.
    """
    channelizer = FftChannelizer(fft_size, hop, sample_rate)
    stats = BinStats(channelizer.channel_count)
    for sample in samples:
        frame = channelizer.push(float(sample))
        if frame is not None:
            stats.observe(np.abs(frame))

    scan_cfg = replace(
        cfg if cfg is not None else ScanConfig(),
        min_bin=max(channelizer.bin_index_for(min_freq), 1),
        max_bin=min(channelizer.bin_index_for(max_freq) + 1, channelizer.channel_count),
    )
    return [channelizer.bin_frequency(b) for b in stats.detect(scan_cfg)]