"""Display rendering utilities for the CHIP-8 emulator."""

from typing import Tuple

import numpy as np
from PIL import Image

from ..display import DisplaySnapshot

BACKGROUND_COLOR = (0x8F, 0x91, 0x85)
PIXEL_COLOR = (0x20, 0x2A, 0x35)


class DisplayRenderer:
    """Renders display snapshots to images for debugging."""

    def __init__(
        self,
        scale: int = 10,
        bg_color: Tuple[int, int, int] = BACKGROUND_COLOR,
        fg_color: Tuple[int, int, int] = PIXEL_COLOR,
    ):
        if scale < 1:
            raise ValueError("Scale must be at least 1")
        self.scale = scale
        self.bg_color = bg_color
        self.fg_color = fg_color

    def render_array(self, snapshot: DisplaySnapshot) -> np.ndarray:
        """Return an RGB array of shape (height*scale, width*scale, 3)."""
        lit = snapshot.to_array()
        rgb = np.empty((snapshot.height, snapshot.width, 3), dtype=np.uint8)
        rgb[:] = self.bg_color
        rgb[lit] = self.fg_color
        return rgb.repeat(self.scale, axis=0).repeat(self.scale, axis=1)

    def render_display(self, snapshot: DisplaySnapshot) -> Image.Image:
        return Image.fromarray(self.render_array(snapshot))

    def save_display(self, snapshot: DisplaySnapshot, filename: str) -> None:
        """Save display to image file."""
        self.render_display(snapshot).save(filename)
