"""Display subsystem for the CHIP-8 emulator."""

from .buffer import (
    EXTENDED_HEIGHT,
    EXTENDED_WIDTH,
    STANDARD_HEIGHT,
    STANDARD_WIDTH,
    DisplayBuffer,
    DisplaySnapshot,
)

__all__ = [
    "DisplayBuffer",
    "DisplaySnapshot",
    "STANDARD_WIDTH",
    "STANDARD_HEIGHT",
    "EXTENDED_WIDTH",
    "EXTENDED_HEIGHT",
]
