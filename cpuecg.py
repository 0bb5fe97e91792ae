#!/usr/bin/env python3
"""
CPU ECG - CPU load drawn as a scrolling heart monitor trace in the terminal
"""

import argparse
import logging
import signal
import sys
import time

from cpuecg_raster import FOOTER_ROWS, HEADER_ROWS, LEFT_GUTTER
from cpuecg_render import Renderer, RenderMetrics
from cpuecg_signal import SIGNAL_RANGES, SIGNED, LoadSampler, OscillatorState, advance, phase_delta
from cpuecg_terminal import CTRL_C, ESC, Terminal
from cpuecg_window import SampleWindow

logger = logging.getLogger('cpuecg')

MILLIS_PER_SEC = 1000
FPS_DEFAULT = 30
FPS_MIN = 10
FPS_MAX = 60
FPS_STEP = 5

QUIT_KEYS = {'q', 'Q', ESC, CTRL_C}
FASTER_KEYS = {'+', '='}
SLOWER_KEYS = {'-', '_'}

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def clamp_fps(fps):
    return max(FPS_MIN, min(FPS_MAX, fps))


class EcgMonitor:
    def __init__(self, terminal, sampler=None, fps=FPS_DEFAULT, signal_range=SIGNED, clock=time.monotonic):
        self.terminal = terminal
        self.sampler = sampler if sampler is not None else LoadSampler()
        self.signal_range = signal_range
        self.renderer = Renderer(terminal, signal_range)
        self.clock = clock
        self.fps = clamp_fps(fps)

        self.state = OscillatorState()
        self.window = SampleWindow()
        self.running = True
        self.last_size = (0, 0)
        self.last_draw = 0.0
        self.frames = 0

    def frame_budget(self):
        """Seconds per frame at the current rate"""
        return (MILLIS_PER_SEC // max(self.fps, 1)) / MILLIS_PER_SEC

    def faster(self):
        self.set_fps(self.fps + FPS_STEP)

    def slower(self):
        self.set_fps(self.fps - FPS_STEP)

    def set_fps(self, fps):
        fps = clamp_fps(fps)
        if fps != self.fps:
            logger.info('fps %d -> %d', self.fps, fps)
        self.fps = fps

    def handle_key(self, key):
        if key in QUIT_KEYS:
            self.running = False
        elif key in FASTER_KEYS:
            self.faster()
        elif key in SLOWER_KEYS:
            self.slower()

    def tick(self):
        """Sample, synthesize and draw one frame"""
        load = self.sampler.sample()
        cols, rows = self.terminal.size()
        plot_width = max(0, cols - LEFT_GUTTER)
        if rows <= HEADER_ROWS + FOOTER_ROWS or plot_width == 0:
            logger.debug('skipping frame, terminal is %dx%d', cols, rows)
            return False

        delta = phase_delta(load)
        sample, self.state = advance(load, self.state, self.signal_range)

        full_clear = (cols, rows) != self.last_size
        if full_clear:
            logger.info('viewport %dx%d -> %dx%d', self.last_size[0], self.last_size[1], cols, rows)
            self.last_size = (cols, rows)

        self.window.update(plot_width, sample)

        metrics = RenderMetrics(load, self.state.phase, self.state.pulse, self.fps, delta)
        return self.renderer.render(list(self.window), metrics, (cols, rows), full_clear)

    def run(self):
        try:
            self.last_size = self.terminal.size()
        except OSError:
            self.last_size = (0, 0)
        self.last_draw = self.clock()

        while self.running:
            now = self.clock()
            elapsed = now - self.last_draw
            budget = self.frame_budget()

            if elapsed < budget:
                key = self.terminal.poll_key(budget - elapsed)
                if key is not None:
                    self.handle_key(key)
                continue

            self.last_draw = now
            self.tick()
            self.frames += 1

        logger.info('stopped after %d frames', self.frames)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='cpuecg',
        description='CPU load as a scrolling ECG trace.',
        epilog='Keys:\n  q/Esc/Ctrl+C  quit\n  +/=           faster\n  -/_           slower',
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '--fps',
        type=int,
        default=FPS_DEFAULT,
        help=f'Initial frame rate, clamped to {FPS_MIN}..{FPS_MAX} (default {FPS_DEFAULT}).',
    )
    parser.add_argument(
        '--range',
        choices=sorted(SIGNAL_RANGES),
        default='signed',
        help='Signal range of the trace: signed is -1..1, unit is 0..1.',
    )
    parser.add_argument(
        '--log-file',
        help='Append diagnostics to this file. Nothing is logged otherwise.',
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Level for --log-file (default INFO).',
    )
    return parser.parse_args(argv)


def configure_logging(log_file=None, level='INFO'):
    # the screen belongs to the renderer, so logs only ever go to a file
    if log_file:
        logging.basicConfig(filename=log_file, level=getattr(logging, level), format=LOG_FORMAT)
    else:
        logging.getLogger().addHandler(logging.NullHandler())


def handle_exit(signum, frame):
    raise SystemExit(0)


def install_signal_handlers():
    signal.signal(signal.SIGINT, handle_exit)
    signal.signal(signal.SIGTERM, handle_exit)
    if hasattr(signal, 'SIGHUP'):
        signal.signal(signal.SIGHUP, handle_exit)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_file, args.log_level)
    install_signal_handlers()
    logger.info('starting at %d fps, %s range', clamp_fps(args.fps), args.range)

    try:
        with Terminal() as terminal:
            monitor = EcgMonitor(terminal, fps=args.fps, signal_range=SIGNAL_RANGES[args.range])
            monitor.run()
    except OSError as exc:
        logger.error('terminal failure: %s', exc)
        print(f'cpuecg: {exc}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
