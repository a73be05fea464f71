"""Immutable RGBA pixel buffer backed by a numpy array."""

from __future__ import annotations

from typing import Tuple

import numpy as np

Color = Tuple[int, int, int, int]

CHANNELS = 4


class PixelBuffer:
    """
    A dense row-major grid of RGBA samples, shape (height, width, 4).

    The backing array is marked read-only on construction, so a buffer can be
    shared between row jobs without locking.
    """

    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise ValueError(f"Expected (h, w, 4) array, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 samples, got {pixels.dtype}")
        pixels = np.ascontiguousarray(pixels)
        pixels.setflags(write=False)
        self._pixels = pixels

    @classmethod
    def filled(cls, width: int, height: int, color: Color) -> "PixelBuffer":
        arr = np.empty((height, width, CHANNELS), dtype=np.uint8)
        arr[:, :] = color
        return cls(arr)

    @staticmethod
    def allocate(width: int, height: int) -> np.ndarray:
        """Writable output array for a transform to fill row by row."""
        return np.zeros((height, width, CHANNELS), dtype=np.uint8)

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the samples."""
        return self._pixels

    def at(self, x: int, y: int) -> Color:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} buffer")
        r, g, b, a = self._pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (self._pixels.shape == other._pixels.shape
                and bool(np.array_equal(self._pixels, other._pixels)))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"
