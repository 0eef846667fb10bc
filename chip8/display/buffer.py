"""Monochrome CHIP-8 frame buffer with standard and extended modes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

STANDARD_WIDTH = 64
STANDARD_HEIGHT = 32
EXTENDED_WIDTH = 128
EXTENDED_HEIGHT = 64


@dataclass(frozen=True)
class DisplaySnapshot:
    """Copied-out frame: row-major pixel bytes (0 or 1), one per pixel."""

    width: int
    height: int
    extended: bool
    pixels: bytes

    def to_array(self) -> np.ndarray:
        """Return a fresh ``(height, width)`` boolean array."""
        return (
            np.frombuffer(self.pixels, dtype=np.uint8)
            .reshape(self.height, self.width)
            .astype(bool)
        )

    def pixel(self, x: int, y: int) -> bool:
        return bool(self.pixels[y * self.width + x])

    def lit_count(self) -> int:
        return sum(self.pixels)


class DisplayBuffer:
    """Pixel grid mutated by draw, clear and scroll instructions.

    Sprites wrap on both axes modulo the active dimensions. Extended mode
    (128x64) is one-way: only :meth:`reset` returns to 64x32.
    """

    def __init__(self) -> None:
        self.extended = False
        self._pixels = np.zeros((STANDARD_HEIGHT, STANDARD_WIDTH), dtype=bool)

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    def reset(self) -> None:
        self.extended = False
        self._pixels = np.zeros((STANDARD_HEIGHT, STANDARD_WIDTH), dtype=bool)

    def enable_extended_mode(self) -> bool:
        """Switch to 128x64; returns False when already extended."""
        if self.extended:
            return False
        self.extended = True
        self._pixels = np.zeros((EXTENDED_HEIGHT, EXTENDED_WIDTH), dtype=bool)
        return True

    def clear(self) -> None:
        self._pixels.fill(False)

    def get_pixel(self, x: int, y: int) -> bool:
        return bool(self._pixels[y % self.height, x % self.width])

    def draw_sprite(self, x: int, y: int, rows: Sequence[int], width: int = 8) -> bool:
        """XOR ``rows`` (MSB = leftmost pixel) at ``(x, y)``.

        Returns True when any lit pixel was switched off.
        """
        collision = False
        height, screen_width = self._pixels.shape
        x0 = x % screen_width
        y0 = y % height
        for row_index, bits in enumerate(rows):
            py = (y0 + row_index) % height
            for col in range(width):
                if not (bits >> (width - 1 - col)) & 1:
                    continue
                px = (x0 + col) % screen_width
                if self._pixels[py, px]:
                    collision = True
                self._pixels[py, px] = not self._pixels[py, px]
        return collision

    def scroll_down(self, rows: int) -> None:
        if rows <= 0:
            return
        rows = min(rows, self.height)
        self._pixels[rows:, :] = self._pixels[: self.height - rows, :].copy()
        self._pixels[:rows, :] = False

    def scroll_right(self, columns: int = 4) -> None:
        columns = min(columns, self.width)
        self._pixels[:, columns:] = self._pixels[:, : self.width - columns].copy()
        self._pixels[:, :columns] = False

    def scroll_left(self, columns: int = 4) -> None:
        columns = min(columns, self.width)
        self._pixels[:, : self.width - columns] = self._pixels[:, columns:].copy()
        self._pixels[:, self.width - columns :] = False

    def get_display_buffer(self) -> np.ndarray:
        """Get a copy of the current display buffer."""
        return self._pixels.copy()

    def snapshot(self) -> DisplaySnapshot:
        return DisplaySnapshot(
            width=self.width,
            height=self.height,
            extended=self.extended,
            pixels=self._pixels.astype(np.uint8).tobytes(),
        )


__all__ = [
    "DisplayBuffer",
    "DisplaySnapshot",
    "STANDARD_WIDTH",
    "STANDARD_HEIGHT",
    "EXTENDED_WIDTH",
    "EXTENDED_HEIGHT",
]
