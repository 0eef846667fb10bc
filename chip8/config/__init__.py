"""Configuration system for the CHIP-8 emulator."""

from .machine_config import MachineConfig

__all__ = ["MachineConfig"]
