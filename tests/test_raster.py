import numpy as np

from cpuecg_raster import (
    CONNECTOR_CHAR,
    GRID_CHAR,
    TRACE_CHAR,
    is_plottable,
    plot_size,
    rasterize,
    sample_rows,
)
from cpuecg_signal import UNIT


def test_plot_size_subtracts_chrome():
    assert plot_size(80, 24) == (22, 75)
    assert plot_size(3, 1) == (0, 0)


def test_too_small_is_skipped():
    assert rasterize([0.0] * 20, 3, 20) is None
    assert rasterize([0.0] * 9, 10, 9) is None
    assert not is_plottable(0, 0)
    assert is_plottable(4, 10)


def test_rows_are_inverted_and_clamped():
    rows = sample_rows([1.0, 0.0, -1.0, 3.0, -3.0], 11)
    assert list(rows) == [0, 5, 10, 0, 10]


def test_unit_range_rows():
    rows = sample_rows([1.0, 0.5, 0.0], 5, UNIT)
    assert list(rows) == [0, 2, 4]


def test_flat_trace_has_no_connectors():
    raster = rasterize([0.0] * 12, 5, 12)
    assert [char for _, _, char in raster.trace] == [TRACE_CHAR] * 12
    assert all(y == 2 for _, y, _ in raster.trace)


def test_grid_dots_off_trace():
    raster = rasterize([1.0] * 12, 9, 12)
    assert raster.cells[4, 0] == GRID_CHAR
    assert raster.cells[4, 6] == GRID_CHAR
    assert raster.cells[8, 6] == GRID_CHAR
    assert raster.cells[4, 3] == ' '
    assert raster.cells[0, 0] == TRACE_CHAR


def test_connectors_fill_between_rows():
    samples = [1.0] + [-1.0] * 11
    raster = rasterize(samples, 5, 12)
    assert raster.trace[:5] == [
        (0, 0, TRACE_CHAR),
        (1, 4, TRACE_CHAR),
        (1, 1, CONNECTOR_CHAR),
        (1, 2, CONNECTOR_CHAR),
        (1, 3, CONNECTOR_CHAR),
    ]
    assert ''.join(raster.cells[:, 1]) == ' |||*'


def test_adjacent_rows_need_no_connector():
    raster = rasterize([1.0, 0.5] + [0.5] * 10, 5, 12)
    assert CONNECTOR_CHAR not in [char for _, _, char in raster.trace]


def test_only_plot_width_samples_are_drawn():
    raster = rasterize([0.0] * 30, 5, 12)
    assert raster.cells.shape == (5, 12)
    assert len(raster.trace) == 12


def test_rasterize_is_deterministic():
    samples = [np.sin(i / 3.0) for i in range(40)]
    first = rasterize(samples, 17, 40)
    second = rasterize(list(samples), 17, 40)
    assert first.trace == second.trace
    assert np.array_equal(first.cells, second.cells)
