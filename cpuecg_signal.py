"""
CPU ECG signal - load sampling and the heartbeat oscillator that turns load into trace samples
"""

import logging
import math
from dataclasses import dataclass, replace

import psutil

logger = logging.getLogger(__name__)

PERCENT_SCALE = 100.0

# Oscillator speed
PHASE_DELTA_BASE = 0.25
PHASE_DELTA_LOAD_SCALE = 0.7
PHASE_WRAP = 1000.0

# Heartbeat pulse
PULSE_LOAD_THRESHOLD = 0.7
PULSE_INTERVAL_TICKS = 18
PULSE_PEAK = 1.0
PULSE_DECAY = 0.65
PULSE_GAIN = 0.9

# Waveform shape
BASE_AMPLITUDE = 0.7
LOW_LOAD_THRESHOLD = 0.2
LOW_LOAD_AMPLITUDE = 0.4
LOW_LOAD_PHASE_SCALE = 0.7

START_TICK = 1


@dataclass(frozen=True)
class SignalRange:
    minimum: float
    maximum: float

    @property
    def span(self):
        return self.maximum - self.minimum

    @property
    def midpoint(self):
        return (self.minimum + self.maximum) / 2.0

    def clamp(self, value):
        return max(self.minimum, min(self.maximum, value))

    def from_signed(self, value):
        """Map a value synthesized in [-1, 1] onto this range"""
        return self.midpoint + value * (self.span / 2.0)

    def normalize(self, value):
        return (value - self.minimum) / self.span


SIGNED = SignalRange(-1.0, 1.0)
UNIT = SignalRange(0.0, 1.0)

SIGNAL_RANGES = {
    'signed': SIGNED,
    'unit': UNIT,
}


def clamp_load(load):
    if load is None or math.isnan(load):
        return 0.0
    return max(0.0, min(1.0, load))


class LoadSampler:
    """Normalized CPU load, degrading to the last good reading when psutil fails"""

    def __init__(self, read_percent=None):
        self.read_percent = read_percent or (lambda: psutil.cpu_percent(interval=None))
        self.load = 0.0
        # psutil measures against the previous call, so the first reading only primes it
        self._read()

    def _read(self):
        try:
            raw = float(self.read_percent())
        except Exception as exc:
            logger.debug('cpu sample failed, keeping %.3f: %s', self.load, exc)
            return None
        if math.isnan(raw):
            logger.debug('cpu sample was NaN, keeping %.3f', self.load)
            return None
        return clamp_load(raw / PERCENT_SCALE)

    def sample(self):
        load = self._read()
        if load is not None:
            self.load = load
        return self.load


@dataclass(frozen=True)
class OscillatorState:
    phase: float = 0.0
    pulse: float = 0.0
    tick: int = START_TICK


def phase_delta(load):
    return PHASE_DELTA_BASE + clamp_load(load) * PHASE_DELTA_LOAD_SCALE


def advance(load, state, signal_range=SIGNED):
    """Synthesize the next sample from the current load.

    Returns the sample and the successor state; the given state is left
    untouched. Under sustained high load the pulse is re-triggered every
    PULSE_INTERVAL_TICKS ticks and decays geometrically every tick. Below
    LOW_LOAD_THRESHOLD the trace becomes a slower, flatter sine with no
    pulse contribution.
    """
    load = clamp_load(load)
    delta = phase_delta(load)

    pulse = state.pulse
    if load > PULSE_LOAD_THRESHOLD and state.tick % PULSE_INTERVAL_TICKS == 0:
        pulse = PULSE_PEAK
    pulse *= PULSE_DECAY

    if load < LOW_LOAD_THRESHOLD:
        value = LOW_LOAD_AMPLITUDE * math.sin(state.phase * LOW_LOAD_PHASE_SCALE)
    else:
        value = BASE_AMPLITUDE * math.sin(state.phase) + pulse * PULSE_GAIN
    sample = signal_range.clamp(signal_range.from_signed(value))

    phase = state.phase + delta
    if phase > PHASE_WRAP:
        phase = 0.0

    return sample, replace(state, phase=phase, pulse=pulse, tick=state.tick + 1)
