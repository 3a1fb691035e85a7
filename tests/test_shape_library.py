"""Tests for SVG segment shape loading."""

import shutil

import numpy as np
import pytest

from conftest import write_svg
from segment_display.core.shape_library import (
    DEFAULT_SHAPES_DIR,
    SEGMENT_COUNT,
    SEGMENT_NAMES,
    ShapeLibrary,
    load_shape,
)
from segment_display.errors import LoadError


@pytest.fixture
def shapes_copy(tmp_path):
    target = tmp_path / "shapes"
    shutil.copytree(DEFAULT_SHAPES_DIR, target)
    return target


def test_bundled_library(bundled_shapes):
    assert len(bundled_shapes) == SEGMENT_COUNT
    assert [s.name for s in bundled_shapes.segments] == list(SEGMENT_NAMES)
    assert bundled_shapes.silhouette.name == "full"
    assert bundled_shapes.reference_bounds == (115.0, 170.0)
    assert bundled_shapes[0] is bundled_shapes.segments[0]


def test_bundled_shapes_fit_canvas(bundled_shapes):
    for shape in bundled_shapes.segments + (bundled_shapes.silhouette,):
        min_x, min_y, max_x, max_y = shape.bounds
        assert 0 <= min_x < max_x <= 115
        assert 0 <= min_y < max_y <= 170
        assert all(path.opacity == 1.0 for path in shape.paths)


def test_silhouette_has_every_segment(bundled_shapes):
    assert len(bundled_shapes.silhouette.paths) == SEGMENT_COUNT


def test_curves_are_flattened(bundled_shapes):
    dot = bundled_shapes[15]
    assert dot.name == "15-dot"
    assert sum(len(p) for p in dot.polygons) > 8
    min_x, _, max_x, _ = dot.bounds
    assert max_x - min_x == pytest.approx(12, abs=0.5)


def test_polygons_are_read_only(bundled_shapes):
    polygon = bundled_shapes[0].polygons[0]
    with pytest.raises(ValueError):
        polygon[0, 0] = 1.0


def test_load_from_directory(shapes_copy):
    library = ShapeLibrary.load(shapes_copy)
    assert len(library) == SEGMENT_COUNT
    assert library.reference_bounds == (115.0, 170.0)


def test_missing_segment_raises(shapes_copy):
    (shapes_copy / "07-comma.svg").unlink()
    with pytest.raises(LoadError, match="07-comma"):
        ShapeLibrary.load(shapes_copy)


def test_missing_silhouette_raises(shapes_copy):
    (shapes_copy / "full.svg").unlink()
    with pytest.raises(LoadError):
        ShapeLibrary.load(shapes_copy)


def test_malformed_svg_raises(shapes_copy):
    (shapes_copy / "03-bottom.svg").write_text("<svg><path d='M 0 0 L")
    with pytest.raises(LoadError):
        ShapeLibrary.load(shapes_copy)


def test_missing_directory_raises(tmp_path):
    with pytest.raises(LoadError):
        ShapeLibrary.load(tmp_path / "nowhere")


def test_shape_without_fill_raises(tmp_path):
    path = write_svg(tmp_path / "empty.svg",
                     '<path d="M 10 10 L 20 10 L 20 20 Z" fill="none" stroke="#000"/>')
    with pytest.raises(LoadError, match="no filled outline"):
        load_shape(path)


def test_shape_without_canvas_raises(tmp_path):
    path = write_svg(tmp_path / "nocanvas.svg", '<path d="M 10 10 L 20 10 L 20 20 Z"/>',
                     canvas="")
    with pytest.raises(LoadError):
        load_shape(path)


def test_width_height_canvas_and_opacity(tmp_path):
    path = write_svg(tmp_path / "half.svg",
                     '<path d="M 10 10 L 30 10 L 30 40 Z" fill="#000" fill-opacity="0.5"/>',
                     canvas='width="50px" height="60px"')
    shape = load_shape(path)
    assert shape.name == "half"
    assert shape.canvas_size == (50.0, 60.0)
    assert shape.paths[0].opacity == pytest.approx(0.5)
    np.testing.assert_allclose(shape.polygons[0], [[10, 10], [30, 10], [30, 40]])


def test_viewbox_origin_is_subtracted(tmp_path):
    path = write_svg(tmp_path / "offset.svg", '<path d="M 110 210 L 120 210 L 120 220 Z"/>',
                     canvas='viewBox="100 200 50 50"')
    shape = load_shape(path)
    assert shape.canvas_size == (50.0, 50.0)
    assert shape.bounds == (10.0, 10.0, 20.0, 20.0)


def test_wrong_segment_count(bundled_shapes):
    with pytest.raises(LoadError):
        ShapeLibrary(bundled_shapes.segments[:15], bundled_shapes.silhouette)


def test_paths_are_kept_separate(tmp_path):
    path = write_svg(tmp_path / "two.svg",
                     '<path d="M 0 0 L 10 0 L 10 10 Z M 20 20 L 30 20 L 30 30 Z"/>'
                     '<path d="M 50 50 L 60 50 L 60 60 Z" fill-opacity="0.25"/>')
    shape = load_shape(path)
    assert len(shape.paths) == 2
    assert len(shape.paths[0].polygons) == 2
    assert len(shape.polygons) == 3
    assert [p.opacity for p in shape.paths] == [1.0, 0.25]


@pytest.mark.parametrize("attrs, opacity", [
    ('fill="#000000" opacity="0.5" fill-opacity="0.5"', 0.25),
    ('fill-opacity="0.5" style="fill-opacity:0.2"', 0.2),
    ('fill="#00000080"', 128 / 255),
    ('fill="#0008"', 0x88 / 255),
    ('fill="rgba(0, 0, 0, 0.4)"', 0.4),
    ('style="fill:rgba(0,0,0,40%)"', 0.4),
])
def test_path_opacity_sources(tmp_path, attrs, opacity):
    path = write_svg(tmp_path / "alpha.svg", f'<path d="M 0 0 L 10 0 L 10 10 Z" {attrs}/>')
    assert load_shape(path).paths[0].opacity == pytest.approx(opacity)


def test_fill_rule_and_unfilled_style(tmp_path):
    path = write_svg(tmp_path / "rules.svg",
                     '<path d="M 0 0 L 10 0 L 10 10 Z" fill-rule="evenodd"/>'
                     '<path d="M 0 0 L 10 0 L 10 10 Z" style="fill-rule:nonzero"/>'
                     '<path d="M 0 0 L 10 0 L 10 10 Z" style="fill:none"/>')
    shape = load_shape(path)
    assert [p.fill_rule for p in shape.paths] == ["evenodd", "nonzero"]


def test_unknown_fill_rule_raises(tmp_path):
    path = write_svg(tmp_path / "rule.svg",
                     '<path d="M 0 0 L 10 0 L 10 10 Z" fill-rule="inherit-ish"/>')
    with pytest.raises(LoadError):
        load_shape(path)
