from collections import deque

import pytest


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeTerminal:
    """Records drawing calls; each poll burns its whole timeout on the fake clock"""

    def __init__(self, clock, size=(80, 24), keys=None, max_polls=1000):
        self.clock = clock
        self.sizes = deque()
        self.current_size = size
        self.keys = deque(keys or [])
        self.max_polls = max_polls
        self.polls = []
        self.calls = []
        self.flushes = 0

    def size(self):
        if self.sizes:
            self.current_size = self.sizes.popleft()
        return self.current_size

    def poll_key(self, timeout):
        self.polls.append(timeout)
        # overshoot slightly so a fully spent budget never reads as a hair short
        self.clock.advance(timeout + 1e-9)
        if self.keys:
            return self.keys.popleft()
        if len(self.polls) >= self.max_polls:
            return 'q'
        return None

    def move_cursor(self, x, y):
        self.calls.append(('move', x, y))

    def write_text(self, text):
        self.calls.append(('text', text))

    def set_foreground(self, color):
        self.calls.append(('color', color))

    def reset_color(self):
        self.calls.append(('reset',))

    def clear_all(self):
        self.calls.append(('clear',))

    def flush(self):
        self.flushes += 1


class FakeSampler:
    def __init__(self, loads):
        self.loads = list(loads)
        self.index = 0

    def sample(self):
        load = self.loads[min(self.index, len(self.loads) - 1)]
        self.index += 1
        return load


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_terminal(clock):
    def factory(**kwargs):
        return FakeTerminal(clock, **kwargs)
    return factory


@pytest.fixture
def make_sampler():
    return FakeSampler
