"""
CPU ECG sample window - the scrolling history behind the trace, one sample per plot column
"""

import logging
from collections import deque

logger = logging.getLogger(__name__)


class SampleWindow:
    def __init__(self):
        self.samples = deque(maxlen=0)
        self.seeded = False

    def __len__(self):
        return len(self.samples)

    def __iter__(self):
        return iter(self.samples)

    @property
    def width(self):
        return self.samples.maxlen

    def last(self, default=None):
        return self.samples[-1] if self.samples else default

    def seed(self, width, sample):
        """Fill the whole window with one sample so the first frame is not a flat line"""
        self.samples = deque([sample] * width, maxlen=width)
        self.seeded = True

    def resize(self, width, fill):
        """Grow by repeating fill on the right, shrink by dropping the oldest samples"""
        if width == self.samples.maxlen and len(self.samples) == width:
            return
        logger.debug('sample window %d -> %d', len(self.samples), width)
        grown = list(self.samples)
        if len(grown) < width:
            grown.extend([fill] * (width - len(grown)))
        # a bounded deque keeps the rightmost entries
        self.samples = deque(grown, maxlen=width)

    def push(self, sample):
        self.samples.append(sample)

    def update(self, width, sample):
        if not self.seeded:
            self.seed(width, sample)
            return
        self.resize(width, self.last(sample))
        self.push(sample)
