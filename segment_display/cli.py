#!/usr/bin/env python3
"""
Segment display command line.

Renders DisplayFrames (raw 16-bit masks, one per cell) either headless to a
PNG file or live in a resizable pygame window.

Examples:
    segment-display --masks 0x3f 0x06 0x5b --output frame.png
    segment-display --frame frame.yaml --size 1280x400 --output frame.png
    segment-display --window --show-fps --profile 5
"""

import argparse
import itertools
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import pygame
import yaml

from segment_display.config import DisplayConfig, load_config
from segment_display.core.frame import DisplayFrame
from segment_display.display import SegmentDisplay
from segment_display.errors import ConfigurationError, LoadError
from segment_display.rendering.overlay import FpsOverlay
from segment_display.utils.logging import get_logger, setup_logging
from segment_display.utils.profiler import FrameProfiler

logger = get_logger(__name__)

DEFAULT_FPS = 30
SWEEP_HOLD_FRAMES = 3


def parse_size(text: str) -> Tuple[int, int]:
    """Parse "WIDTHxHEIGHT" into a tuple."""
    try:
        width, height = (int(part) for part in text.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Size must look like 800x300, got {text!r}")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Size must be positive, got {text!r}")
    return (width, height)


def mask_value(text: str) -> int:
    """Parse a mask given as decimal, 0x hex or 0b binary."""
    value = int(text, 0)
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"Mask out of range 0x0000-0xFFFF: {text!r}")
    return value


def parse_mask(text: str) -> int:
    """argparse type wrapper around mask_value()."""
    try:
        return mask_value(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid mask {text!r}: {e}")


def load_frame_file(path: str) -> List[int]:
    """
    Read masks from a YAML file: either a list, or a mapping with a `masks` list.

    String entries are parsed like --masks values.
    """
    with open(path, 'r') as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get('masks')
    if not isinstance(data, list):
        raise ConfigurationError(f"Frame file {path} must contain a list of masks")
    return [mask_value(m) if isinstance(m, str) else int(m) for m in data]


def build_frame(masks: Sequence[int], cell_count: int) -> DisplayFrame:
    """Pad the masks with blank cells up to the grid size."""
    if len(masks) > cell_count:
        raise ConfigurationError(f"Got {len(masks)} masks for a grid of {cell_count} cells")
    return DisplayFrame(list(masks) + [0] * (cell_count - len(masks)))


def sweep_frames(cell_count: int, hold: int = SWEEP_HOLD_FRAMES) -> Iterator[DisplayFrame]:
    """Test pattern: light each segment of each cell in turn, forever."""
    for step in itertools.count():
        position = (step // hold) % (cell_count * 16)
        cell, bit = divmod(position, 16)
        yield DisplayFrame.from_cells(cell_count, {cell: 1 << bit})


def render_to_file(display: SegmentDisplay, frame: DisplayFrame, output: str):
    """Render one frame headless and save it as an image."""
    cfg = display.config
    display.resize(cfg.target_width, cfg.target_height)
    surface = display.render(frame)
    Path(output).parent.mkdir(parents=True, exist_ok=True)
    pygame.image.save(surface, output)
    logger.info(f"Saved {cfg.target_width}x{cfg.target_height} frame to {output}")


def run_window(display: SegmentDisplay, frame: Optional[DisplayFrame] = None,
               fps: int = DEFAULT_FPS, max_frames: Optional[int] = None) -> int:
    """
    Show frames in a resizable window until closed (Esc or window close).

    Resizing the window rebuilds the geometry and the atlas. Without a
    frame, a sweep test pattern runs.

    Returns:
        Process exit code
    """
    cfg = display.config
    pygame.init()
    try:
        screen = pygame.display.set_mode((cfg.target_width, cfg.target_height), pygame.RESIZABLE)
        pygame.display.set_caption("Segment Display")
        clock = pygame.time.Clock()
        bitmap = display.create_image(cfg.target_width, cfg.target_height)

        frames = itertools.repeat(frame) if frame is not None else sweep_frames(cfg.cell_count)
        logger.info("Starting render loop...")

        rendered = 0
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    screen = pygame.display.set_mode(event.size, pygame.RESIZABLE)
                    try:
                        bitmap = display.create_image(*event.size)
                    except ConfigurationError as e:
                        logger.warning(f"Keeping previous geometry: {e}")

            display.update_frame(next(frames))
            if display.draw_image(bitmap):
                screen.blit(bitmap.to_surface(), (0, 0))
            pygame.display.flip()
            clock.tick(fps)

            rendered += 1
            if max_frames is not None and rendered >= max_frames:
                running = False
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        display.close()
        pygame.quit()
        logger.info("Shutdown complete")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Segment Display - render 16-segment alphanumeric display frames"
    )
    parser.add_argument("-c", "--config", help="Path to display configuration YAML")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--size", type=parse_size, metavar="WxH",
                        help="Canvas size (default: 800x300)")
    parser.add_argument("--shapes", metavar="DIR", help="Directory of segment SVGs")

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--masks", nargs="+", type=parse_mask, metavar="MASK",
                        help="Cell masks in row-major order; missing cells are blank")
    source.add_argument("--frame", metavar="FILE", help="YAML file with a list of masks")

    output = parser.add_mutually_exclusive_group(required=True)
    output.add_argument("-o", "--output", metavar="FILE", help="Render headless to an image file")
    output.add_argument("--window", action="store_true", help="Show frames in a window")

    parser.add_argument("--fps", type=int, default=DEFAULT_FPS,
                        help=f"Window frame rate (default: {DEFAULT_FPS})")
    parser.add_argument("--show-fps", action="store_true", help="Draw FPS counters in the window")
    parser.add_argument("--profile", nargs="?", const=5.0, type=float, metavar="INTERVAL",
                        help="Enable performance profiling (optional: report interval in seconds)")
    parser.add_argument("--max-frames", type=int, help=argparse.SUPPRESS)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the segment-display command."""
    args = build_parser().parse_args(argv)

    setup_logging(verbose=args.verbose)

    try:
        config = load_config(args.config) if args.config else DisplayConfig()
        if args.size:
            config.target_width, config.target_height = args.size
        if args.shapes:
            config.shapes_dir = args.shapes
        config.validate()

        frame = None
        if args.masks:
            frame = build_frame(args.masks, config.cell_count)
        elif args.frame:
            frame = build_frame(load_frame_file(args.frame), config.cell_count)

        profiler = None
        if args.profile is not None or args.show_fps:
            profiler = FrameProfiler(interval=args.profile or 0.0)
        overlay = FpsOverlay(profiler) if args.show_fps else None

        display = SegmentDisplay.from_config(config, profiler=profiler, overlay=overlay)

        if args.output:
            render_to_file(display, frame or DisplayFrame.blank(config.cell_count), args.output)
            return 0
        return run_window(display, frame, fps=args.fps, max_frames=args.max_frames)

    except (ValueError, LoadError, OSError, yaml.YAMLError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
