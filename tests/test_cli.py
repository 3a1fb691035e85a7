"""Tests for the segment-display command line."""

import argparse
import itertools

import pygame
import pytest

from conftest import is_bright, surface_rgba
from segment_display.cli import (
    build_frame,
    build_parser,
    load_frame_file,
    main,
    parse_mask,
    parse_size,
    sweep_frames,
)
from segment_display.errors import ConfigurationError


def test_parse_size():
    assert parse_size("800x300") == (800, 300)
    assert parse_size("1280X400") == (1280, 400)
    for text in ("800", "0x300", "axb"):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_size(text)


def test_parse_mask():
    assert parse_mask("0xffff") == 0xFFFF
    assert parse_mask("0b101") == 5
    assert parse_mask("12") == 12
    for text in ("0x10000", "-1", "abc"):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_mask(text)


def test_output_and_window_are_exclusive():
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["--output", "a.png", "--window"])
    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_build_frame_pads_cells():
    frame = build_frame([1, 2], 4)
    assert list(frame) == [1, 2, 0, 0]
    with pytest.raises(ConfigurationError):
        build_frame([1] * 5, 4)


def test_load_frame_file(tmp_path):
    listing = tmp_path / "list.yaml"
    listing.write_text("- 0x3f\n- 6\n")
    assert load_frame_file(str(listing)) == [0x3F, 6]

    mapping = tmp_path / "map.yaml"
    mapping.write_text("masks: ['0b1', 65535]\n")
    assert load_frame_file(str(mapping)) == [1, 0xFFFF]

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("7\n")
    with pytest.raises(ConfigurationError):
        load_frame_file(str(scalar))


def test_sweep_frames():
    frames = list(itertools.islice(sweep_frames(2, hold=2), 6))
    assert [list(f) for f in frames] == [
        [1, 0], [1, 0], [2, 0], [2, 0], [4, 0], [4, 0],
    ]
    wrapped = next(itertools.islice(sweep_frames(2, hold=1), 32, None))
    assert list(wrapped) == [1, 0]


def test_render_to_file(tmp_path):
    output = tmp_path / "out" / "frame.png"
    code = main(["--masks", "0xffff", "--size", "400x150", "--output", str(output)])
    assert code == 0
    image = pygame.image.load(str(output))
    assert image.get_size() == (400, 150)
    assert is_bright(surface_rgba(image)[..., :3]).any()


def test_render_frame_file_with_config(tmp_path):
    config = tmp_path / "display.yaml"
    config.write_text("display:\n  lines: 1\n  cells_per_line: 4\n  width: 300\n  height: 120\n")
    frame = tmp_path / "frame.yaml"
    frame.write_text("masks: [1, 2, 4, 8]\n")
    output = tmp_path / "frame.png"

    code = main(["-c", str(config), "--frame", str(frame), "--output", str(output)])
    assert code == 0
    assert pygame.image.load(str(output)).get_size() == (300, 120)


def test_errors_exit_nonzero(tmp_path):
    output = str(tmp_path / "frame.png")
    assert main(["--masks"] + ["1"] * 41 + ["--output", output]) == 1
    assert main(["--shapes", str(tmp_path / "missing"), "--output", output]) == 1
    assert main(["-c", str(tmp_path / "missing.yaml"), "--output", output]) == 1
    assert main(["--size", "20x300", "--output", output]) == 1


def test_window_runs_headless():
    code = main(["--window", "--show-fps", "--profile", "1", "--max-frames", "3", "--fps", "0"])
    assert code == 0
