"""Collapse a boolean key-state stream into run-length events."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Run:
    """One run of identical key states: ``mark`` for key down, ``duration`` in ticks."""

    mark: bool
    duration: int


class RunLengthEncoder:
    """Streaming run-length encoder over boolean samples."""

    def __init__(self) -> None:
        self._current: bool | None = None
        self._run = 0

    def push(self, sample: bool) -> Run | None:
        """Feed one sample; return the finished run when the state flips."""
        sample = bool(sample)
        if self._current is None:
            self._current = sample
            self._run = 1
            return None
        if self._current == sample:
            self._run += 1
            return None
        finished = Run(self._current, self._run)
        self._current = sample
        self._run = 1
        return finished

    def finish(self) -> Run | None:
        """Flush the in-progress run, if any."""
        if self._current is None:
            return None
        finished = Run(self._current, self._run)
        self._current = None
        self._run = 0
        return finished