"""
CPU ECG rasterizer - projects the sample window onto a character grid
"""

from collections import namedtuple

import numpy as np

from cpuecg_signal import SIGNED

HEADER_ROWS = 1
FOOTER_ROWS = 1
LEFT_GUTTER = 5

GRID_ROW_STEP = 4
GRID_COL_STEP = 6
MIN_PLOT_HEIGHT = 4
MIN_PLOT_WIDTH = 10

BLANK = ' '
GRID_CHAR = '.'
TRACE_CHAR = '*'
CONNECTOR_CHAR = '|'

Raster = namedtuple('Raster', ['cells', 'trace'])


def plot_size(cols, rows):
    """Drawable (height, width) left after the header, footer and axis gutter"""
    height = max(0, rows - HEADER_ROWS - FOOTER_ROWS)
    width = max(0, cols - LEFT_GUTTER)
    return height, width


def is_plottable(plot_height, plot_width):
    return plot_height >= MIN_PLOT_HEIGHT and plot_width >= MIN_PLOT_WIDTH


def sample_rows(samples, plot_height, signal_range=SIGNED):
    """Row index per sample, row 0 at the top holding the range maximum"""
    values = np.asarray(samples, dtype=float)
    normalized = (values - signal_range.minimum) / signal_range.span
    # round half away from zero; negative rows clip to 0 either way
    rows = np.floor((1.0 - normalized) * (plot_height - 1) + 0.5)
    return np.clip(rows, 0, plot_height - 1).astype(int)


def rasterize(samples, plot_height, plot_width, signal_range=SIGNED):
    """Build the character grid and the ordered trace points for one frame.

    Returns None when the plot area is below the minimum size. Each trace
    point is an (x, y, char) tuple; a column whose row differs from the
    previous column gets connector chars on every row strictly between
    the two.
    """
    if not is_plottable(plot_height, plot_width):
        return None

    cells = np.full((plot_height, plot_width), BLANK, dtype='<U1')
    cells[::GRID_ROW_STEP, ::GRID_COL_STEP] = GRID_CHAR

    trace = []
    prev_y = None
    window = list(samples)[:plot_width]
    if window:
        rows = sample_rows(window, plot_height, signal_range)
    else:
        rows = []
    for x, y in enumerate(rows):
        y = int(y)
        trace.append((x, y, TRACE_CHAR))
        cells[y, x] = TRACE_CHAR
        if prev_y is not None and prev_y != y:
            for row in range(min(prev_y, y) + 1, max(prev_y, y)):
                trace.append((x, row, CONNECTOR_CHAR))
                cells[row, x] = CONNECTOR_CHAR
        prev_y = y

    return Raster(cells, trace)
