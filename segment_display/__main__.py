"""Allow `python -m segment_display`."""

import sys

from segment_display.cli import main

if __name__ == "__main__":
    sys.exit(main())
