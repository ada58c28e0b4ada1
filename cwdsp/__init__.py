"""Streaming DSP stages for detecting and slicing narrow-band CW signals.

Goertzel detectors, an FFT channelizer, an envelope slicer, a run-length
encoder, occupied-bin scanning and ready-made envelope front ends.
"""

__version__ = "0.1.0"