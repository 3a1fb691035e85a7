"""Tests for cell geometry."""

import logging
import math

import pytest

from segment_display.core.geometry import CellGeometry, compute_geometry, skewed_width
from segment_display.errors import ConfigurationError

REFERENCE = (115.0, 170.0)


def test_skewed_width():
    assert skewed_width(10, 20, 0) == pytest.approx(10)
    assert skewed_width(10, 20, 45) == pytest.approx(30)
    # Sign of the angle does not matter
    assert skewed_width(10, 20, -45) == pytest.approx(30)


def test_reference_scenario():
    g = compute_geometry(800, 300, lines=2, cells_per_line=20, skew_angle_degrees=-15,
                         padding_px=20, reference_bounds=REFERENCE)

    skew_factor = skewed_width(*REFERENCE, -15) / REFERENCE[0]
    assert g.cell_width * (19 + skew_factor) == pytest.approx(760)
    assert g.scale_factor == pytest.approx(g.cell_width / 115)
    assert g.cell_height == pytest.approx(170 * g.scale_factor)
    assert g.canvas_size == (800, 300)
    assert g.cell_count == 40


@pytest.mark.parametrize("width, height, cells, skew, padding", [
    (800, 300, 20, -15, 20),
    (1920, 1080, 16, -15, 0),
    (640, 480, 8, 0, 12.5),
    (300, 200, 2, 30, 5),
])
def test_grid_fills_width(width, height, cells, skew, padding):
    g = compute_geometry(width, height, lines=2, cells_per_line=cells,
                         skew_angle_degrees=skew, padding_px=padding, reference_bounds=REFERENCE)
    grid_width = (cells - 1) * g.cell_width + skewed_width(g.cell_width, g.cell_height, skew)
    assert grid_width + 2 * padding == pytest.approx(width)
    assert g.grid_size[0] == pytest.approx(width)


def test_raster_covers_skewed_cell():
    g = compute_geometry(800, 300, reference_bounds=REFERENCE)
    exact = skewed_width(g.cell_width, g.cell_height, g.skew_angle_degrees)
    assert g.raster_width == math.ceil(exact)
    assert g.raster_height == math.ceil(g.cell_height)
    assert isinstance(g.raster_width, int)


def test_rows_do_not_depend_on_skew():
    straight = compute_geometry(800, 300, skew_angle_degrees=0, reference_bounds=REFERENCE)
    skewed = compute_geometry(800, 300, skew_angle_degrees=-15, reference_bounds=REFERENCE)
    for g in (straight, skewed):
        assert g.cell_origin(1, 0)[1] == pytest.approx(20 + g.cell_height + 10)
        assert g.grid_size[1] == pytest.approx(40 + 2 * g.cell_height + 10)


def test_cell_positions_row_major():
    g = compute_geometry(800, 300, lines=2, cells_per_line=20, reference_bounds=REFERENCE)
    positions = g.cell_positions()
    assert len(positions) == 40
    assert positions[0] == (20, 20)
    assert positions[1][0] == round(20 + g.cell_width)
    assert positions[20][0] == 20
    assert positions[20][1] > positions[19][1]
    assert all(isinstance(v, int) for pos in positions for v in pos)


@pytest.mark.parametrize("kwargs", [
    dict(cells_per_line=1),
    dict(cells_per_line=0),
    dict(lines=0),
    dict(skew_angle_degrees=90),
    dict(padding_px=400),
    dict(reference_bounds=(0, 170)),
])
def test_degenerate_inputs_raise(kwargs):
    params = dict(reference_bounds=REFERENCE)
    params.update(kwargs)
    with pytest.raises(ConfigurationError):
        compute_geometry(800, 300, **params)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        compute_geometry(800, 300, cells_per_line=1)


def test_too_tall_grid_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="segment_display.core.geometry"):
        g = compute_geometry(800, 50, reference_bounds=REFERENCE)
    assert g.grid_size[1] > 50
    assert "exceeds canvas height" in caplog.text


def test_geometry_value_equality():
    a = compute_geometry(800, 300, reference_bounds=REFERENCE)
    b = compute_geometry(800, 300, reference_bounds=REFERENCE)
    c = compute_geometry(801, 300, reference_bounds=REFERENCE)
    assert a == b
    assert a != c
    assert isinstance(a, CellGeometry)
