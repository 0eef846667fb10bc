"""Debug utilities for the CHIP-8 emulator."""

from .renderer import DisplayRenderer
from .inspector import MemoryInspector

__all__ = ["DisplayRenderer", "MemoryInspector"]
