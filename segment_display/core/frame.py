"""
DisplayFrame: one snapshot of per-cell segment masks.

Bit j of cell i lights segment j at cell i. Frames are produced externally
(character mapping is not done here) and only read while compositing.
"""

from typing import Iterable, Iterator, Sequence, Union

import numpy as np

MASK_ALL = 0xFFFF


class DisplayFrame:
    """Immutable sequence of unsigned 16-bit cell masks in row-major order."""

    __slots__ = ("_masks",)

    def __init__(self, masks: Union[Sequence[int], np.ndarray]):
        values = np.asarray(masks)
        if values.ndim != 1:
            raise ValueError(f"Frame masks must be one-dimensional, got shape {values.shape}")
        if values.size and not np.issubdtype(values.dtype, np.integer):
            raise ValueError(f"Frame masks must be integers, got {values.dtype}")
        if values.size and (values.min() < 0 or values.max() > MASK_ALL):
            raise ValueError("Frame masks must be within 0x0000-0xFFFF")

        self._masks = values.astype(np.uint16)
        self._masks.flags.writeable = False

    @classmethod
    def blank(cls, cell_count: int) -> "DisplayFrame":
        """Frame with every segment off."""
        return cls(np.zeros(cell_count, dtype=np.uint16))

    @classmethod
    def from_cells(cls, cell_count: int, cells: dict) -> "DisplayFrame":
        """Frame of `cell_count` cells with {index: mask} set and the rest off."""
        masks = np.zeros(cell_count, dtype=np.int64)
        for index, mask in cells.items():
            masks[index] = mask
        return cls(masks)

    @property
    def masks(self) -> np.ndarray:
        """Read-only uint16 array of cell masks."""
        return self._masks

    def lit_segments(self) -> np.ndarray:
        """
        (cell, bit) pairs of every lit segment.

        Ordered by cell, then by ascending bit, which is the compositing order.
        """
        bits = (self._masks[:, None] >> np.arange(16, dtype=np.uint16)) & 1
        return np.argwhere(bits)

    def __len__(self) -> int:
        return int(self._masks.size)

    def __iter__(self) -> Iterator[int]:
        return (int(m) for m in self._masks)

    def __getitem__(self, index: int) -> int:
        return int(self._masks[index])

    def __eq__(self, other) -> bool:
        if not isinstance(other, DisplayFrame):
            return NotImplemented
        return np.array_equal(self._masks, other._masks)

    def __repr__(self) -> str:
        return f"DisplayFrame({[hex(m) for m in self]})"


def as_frame(frame: Union["DisplayFrame", Iterable[int]]) -> DisplayFrame:
    """Wrap a plain mask sequence as a DisplayFrame."""
    if isinstance(frame, DisplayFrame):
        return frame
    return DisplayFrame(list(frame))
