"""Parallel bank of tuned Goertzel detectors sharing one input stream."""

from __future__ import annotations

from collections.abc import Iterable

from cwdsp.envelope import Goertzel


class GoertzelBank:
    """N independent Goertzel filters with a common block length.

    Every ``block_len`` input samples the bank yields one envelope magnitude
    per tone, in the order the tones were given.
    """

    def __init__(self, tones: Iterable[float], sample_rate_hz: float, block_len: int) -> None:
        tone_list = [float(t) for t in tones]
        if not tone_list:
            raise ValueError("bank needs at least one tone")
        self._filters = [Goertzel(t, sample_rate_hz, block_len) for t in tone_list]
        self._envelopes = [0.0] * len(tone_list)
        self._tones = tuple(tone_list)
        self._sample_rate = sample_rate_hz
        self._block_len = block_len

    @property
    def channel_count(self) -> int:
        """Number of channels in the bank."""
        return len(self._filters)

    @property
    def block_len(self) -> int:
        """Block length, in input samples, between envelope outputs."""
        return self._block_len

    @property
    def envelope_sample_rate(self) -> float:
        """Envelope samples per second."""
        return self._sample_rate / self._block_len

    @property
    def tones(self) -> tuple[float, ...]:
        """Tone frequencies of all channels, in Hz."""
        return self._tones

    def tone(self, idx: int) -> float:
        """Tone frequency assigned to channel ``idx``, in Hz."""
        return self._tones[idx]

    def push(self, sample: float) -> tuple[float, ...] | None:
        """Feed one sample to every filter; return the envelopes at each block end."""
        ready = False
        for i, g in enumerate(self._filters):
            mag = g.push(sample)
            if mag is not None:
                self._envelopes[i] = mag
                ready = True
        return tuple(self._envelopes) if ready else None