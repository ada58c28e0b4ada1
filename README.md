# cwdsp

Streaming signal-processing stages for pulling narrow-band CW (Morse)
signals out of audio. Every stage takes one sample at a time, keeps its own
state, and hands back a result only when it has one, so the stages can be
driven from any stream of floats.

The chain looks like this:

```
audio ──► Goertzel / GoertzelBank / FftChannelizer ──► Threshold ──► RunLengthEncoder ──► runs
```

The `(mark, duration)` runs at the end are what a Morse timing decoder
consumes.

## Stages

| Module | Names | What it does |
|---|---|---|
| `cwdsp.envelope` | `Goertzel` | Single-bin tone detector; one magnitude per block of samples. |
| `cwdsp.bank` | `GoertzelBank` | Several `Goertzel` filters driven from one input stream. |
| `cwdsp.channelizer` | `FftChannelizer` | Hann-windowed FFT filterbank over the whole half-spectrum. |
| `cwdsp.threshold` | `Threshold` | Peak-tracking slicer with hysteresis: envelope in, key state out. |
| `cwdsp.runlength` | `Run`, `RunLengthEncoder` | Collapses a key-state stream into `(mark, duration)` runs. |
| `cwdsp.scan` | `BinStats`, `ScanConfig`, `median` | Finds FFT bins that carry keyed CW signals. |
| `cwdsp.frontend` | `GoertzelBackend`, `FftBackend`, `scan_for_tones`, `auto_fft_size`, `auto_hop`, `auto_block_len`, `prev_pow2` | Envelope front ends and automatic parameter choice. |

A unit-amplitude sine tone at the target frequency gives an envelope of
about 0.5, from either the Goertzel filter or the channelizer.

## A single tone

```python
from cwdsp.envelope import Goertzel
from cwdsp.threshold import Threshold
from cwdsp.runlength import RunLengthEncoder

sample_rate = 8000.0
block_len = 32
env_rate = sample_rate / block_len

goertzel = Goertzel(700.0, sample_rate, block_len)
slicer = Threshold(env_rate, 1.0, 0.005)
rle = RunLengthEncoder()

runs = []
for sample in samples:              # any iterable of floats
    env = goertzel.push(sample)
    if env is None:
        continue
    run = rle.push(slicer.push(env))
    if run is not None:
        runs.append(run)

last = rle.finish()
if last is not None:
    runs.append(last)

for run in runs:
    print("mark" if run.mark else "space", run.duration)
```

Durations are counted in envelope samples, so one tick here lasts
`1 / env_rate` seconds.

`Threshold` switches on above 55 % of its tracked peak and off below 35 %;
`with_hysteresis(on, off)` returns a slicer with other fractions. The peak
decays with the given half-life but never drops below `min_peak`.

## Several known tones

```python
from cwdsp.bank import GoertzelBank

bank = GoertzelBank([600.0, 1400.0], 8000.0, 32)
for sample in samples:
    envs = bank.push(sample)
    if envs is not None:
        low, high = envs            # one envelope per tone, in order
```

On quiet channels, give the slicer an absolute floor so that leakage from a
strong neighbour never switches it on (`cwdsp.frontend.DEFAULT_MULTI_ON_FLOOR`
is 0.08):

```python
slicer = Threshold(env_rate, 1.0, 0.005).with_absolute_on_floor(0.08)
```

`with_absolute_on_floor` and `with_hysteresis` return a new slicer and leave
the original unchanged.

## The whole band at once

```python
from cwdsp.channelizer import FftChannelizer

chan = FftChannelizer(1024, 64, 8000.0)
bin_700 = chan.bin_index_for(700.0)
print(chan.bin_frequency(bin_700))  # centre of the nearest bin

for sample in samples:
    bins = chan.push(sample)        # numpy array of complex values, or None
    if bins is not None:
        envelope = abs(bins[bin_700])
```

The first frame comes out once `fft_size` samples have arrived; after that
there is one frame every `hop` samples. Each frame holds
`channel_count == fft_size // 2 + 1` bins, DC and Nyquist included.

## Finding signals

`scan_for_tones` runs a calibration window through a channelizer, collects
per-bin statistics in a `BinStats` and returns the centre frequencies, in
ascending order, of bins that look like keyed CW. A bin has to stand above
the median noise floor both in peak level (`peak_snr_db`) and in envelope
swing (`variance_ratio`), so steady carriers are left out. Neighbouring
bins of one strong signal are merged (`nms_radius`), and much weaker bins
near a strong one are treated as its sidebands (`dominance_radius`,
`dominance_db`). At most `max_channels` bins are returned.

```python
from cwdsp.frontend import auto_fft_size, auto_hop, scan_for_tones
from cwdsp.scan import ScanConfig

sample_rate = 8000.0
fft_size = auto_fft_size(sample_rate, 20.0)
hop = auto_hop(sample_rate, 20.0, fft_size)

tones = scan_for_tones(
    calibration_samples, sample_rate, fft_size, hop,
    ScanConfig(), 300.0, 3000.0,
)
```

The search range is set from `min_freq` and `max_freq`; DC is always
skipped. `auto_fft_size` picks the largest power of two whose window is no
longer than one dit at the given speed, kept between 128 and 4096.
`auto_hop` aims for about ten envelope samples per dit, kept between 1 and
`fft_size // 2`. `auto_block_len` picks a Goertzel block spanning about four
cycles of the lowest tone, and never fewer than 16 samples.

## Front ends

`GoertzelBackend` and `FftBackend` wrap a bank or a channelizer behind the
same interface: `push(sample)` returns a list with one envelope per tone
when a frame is ready, `envelope_sample_rate` gives the frame rate, and
`labels()` gives a printable frequency label per channel. `FftBackend`
moves each tone to the nearest FFT bin; its `bins`, `frequencies` and
labels show the bins actually used.

```python
from cwdsp.frontend import FftBackend, GoertzelBackend, auto_block_len

tones = [600.0, 1400.0]
goertzel_backend = GoertzelBackend(8000.0, tones, auto_block_len(8000.0, tones))
fft_backend = FftBackend(1024, 64, 8000.0, tones)
print(fft_backend.labels())
```

## Errors

Settings that cannot work raise `ValueError`: a Goertzel block too short to
hold one cycle of the tone, an empty tone list, a hop larger than the FFT
size, a non-positive speed, or a frame whose width does not match the bin
count. Asking for a bin outside the valid range (`bin_frequency`,
`BinStats.peak`, `mean`, `stddev`) raises `IndexError`.

## What this package does not do

It stops at `(mark, duration)` runs: it does not turn them into letters,
estimate keying speed, or print decoded text. It does not read WAV files
or capture from a sound card; you supply the samples. There is no
command-line program.