"""
CPU ECG renderer - header, axis gutter, grid, colored trace and footer
"""

import logging
import math
from collections import namedtuple

from cpuecg_raster import HEADER_ROWS, LEFT_GUTTER, plot_size, rasterize
from cpuecg_signal import PERCENT_SCALE, SIGNED

logger = logging.getLogger(__name__)

FOOTER_TEXT = 'Press Q/Esc to quit  +/- to change FPS'
BLANK_GUTTER = ' ' * LEFT_GUTTER

RenderMetrics = namedtuple('RenderMetrics', ['load', 'phase', 'pulse', 'fps', 'phase_delta'])


def line_color(load):
    if load < 0.5:
        return 'green'
    if load < 0.75:
        return 'yellow'
    return 'red'


def pad_to_width(text, width):
    return text[:width].ljust(width)


def oscillation_hz(metrics):
    if metrics.phase_delta <= 0:
        return 0.0
    return metrics.phase_delta * metrics.fps / (2 * math.pi)


def header_text(metrics):
    return (
        f"CPU ECG  load: {metrics.load * PERCENT_SCALE:>5.1f}%  fps: {metrics.fps:>2}  "
        f"osc: {oscillation_hz(metrics):>4.2f}Hz  phase: {metrics.phase:>5.1f}  "
        f"pulse: {metrics.pulse:>4.2f}"
    )


def axis_label(value):
    return f"{value:>4.1f}|"


def gutter_labels(plot_height, signal_range=SIGNED):
    """Row -> label for the top, middle and bottom of the plot"""
    # assigned bottom-up so the top label wins on tiny plots
    return {
        plot_height - 1: axis_label(signal_range.minimum),
        plot_height // 2: axis_label(signal_range.midpoint),
        0: axis_label(signal_range.maximum),
    }


class Renderer:
    def __init__(self, terminal, signal_range=SIGNED):
        self.terminal = terminal
        self.signal_range = signal_range

    def render(self, samples, metrics, size, full_clear=False):
        """Draw one frame; returns False without touching the terminal if it is too small"""
        cols, rows = size
        if cols <= 0 or rows <= 0:
            return False
        plot_height, plot_width = plot_size(cols, rows)
        raster = rasterize(samples, plot_height, plot_width, self.signal_range)
        if raster is None:
            logger.debug('viewport %dx%d too small to plot', cols, rows)
            return False

        term = self.terminal
        if full_clear:
            term.clear_all()

        term.move_cursor(0, 0)
        term.set_foreground('white')
        term.write_text(pad_to_width(header_text(metrics), cols))

        self.draw_plot(raster, line_color(metrics.load))

        term.set_foreground('grey')
        term.move_cursor(0, rows - 1)
        term.write_text(pad_to_width(FOOTER_TEXT, cols))
        term.reset_color()
        term.flush()
        return True

    def draw_plot(self, raster, trace_color):
        """Grid and gutter in grey, trace cells in the load color"""
        term = self.terminal
        labels = gutter_labels(len(raster.cells), self.signal_range)
        trace_cells = {(x, y) for x, y, _ in raster.trace}

        for y, line in enumerate(raster.cells):
            term.move_cursor(0, HEADER_ROWS + y)
            term.set_foreground('grey')
            term.write_text(labels.get(y, BLANK_GUTTER))

            current = 'grey'
            run = []
            for x, char in enumerate(line):
                color = trace_color if (x, y) in trace_cells else 'grey'
                if color != current:
                    term.write_text(''.join(run))
                    term.set_foreground(color)
                    current = color
                    run = []
                run.append(str(char))
            term.write_text(''.join(run))
