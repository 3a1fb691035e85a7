"""
Dual-sink logging for the segment display renderer.

Logs to stdout and, when a writable location exists, to a log file.
"""

import sys
import logging
from pathlib import Path
from typing import List, Optional


# Log file paths (in order of preference)
LOG_FILE_PATHS = [
    "/var/log/segment_display.log",
    "/tmp/segment_display.log",
]

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _find_log_file(candidates: List[str]) -> Optional[str]:
    """Return the first candidate path that can be opened for append."""
    for path in candidates:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'a'):
                pass
            return path
        except (PermissionError, OSError):
            continue
    return None


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None,
                  log_format: Optional[str] = None,
                  file_sink: bool = True) -> logging.Logger:
    """
    Setup dual-sink logging.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
        log_file: Override log file path. If None, uses default paths.
        log_format: Override log format string.
        file_sink: Set False to log to the console only.

    Returns:
        The segment_display package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    log_format = log_format or DEFAULT_LOG_FORMAT

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(console_handler)

    file_path = None
    if file_sink:
        file_path = log_file or _find_log_file(LOG_FILE_PATHS)

    if file_path:
        try:
            file_handler = logging.FileHandler(file_path, mode='a')
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(log_format))
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not setup file logging at {file_path}: {e}",
                  file=sys.stderr)

    logging.basicConfig(level=level, format=log_format, handlers=handlers)

    logger = logging.getLogger("segment_display")
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically __name__)."""
    return logging.getLogger(name)
