"""Exceptions raised by the CHIP-8 core."""

from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for errors that terminate one emulated program run."""


class AddressOutOfRangeError(Chip8Error, IndexError):
    """Memory access outside the 4 KiB address space."""

    def __init__(self, address: int, size: int, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or f"Address 0x{address:04X} outside memory range 0x000-0x{size - 1:03X}"
        )
        self.address = address
        self.size = size


class StackOverflowError(Chip8Error):
    """Subroutine call with the return stack already full."""

    def __init__(self, depth: int) -> None:
        super().__init__(f"Stack overflow (capacity {depth})")
        self.depth = depth


class StackUnderflowError(Chip8Error):
    """Return executed with an empty stack."""

    def __init__(self) -> None:
        super().__init__("Stack underflow (return with empty stack)")


class UnsupportedOpcodeError(Chip8Error):
    """Opcode that the executor cannot run."""

    def __init__(self, opcode: int, address: Optional[int] = None) -> None:
        where = f" at 0x{address:03X}" if address is not None else ""
        super().__init__(f"Unsupported opcode 0x{opcode:04X}{where}")
        self.opcode = opcode
        self.address = address


class ProgramTooLargeError(Chip8Error, ValueError):
    """Program image does not fit between the load address and end of memory."""

    def __init__(self, size: int, capacity: int) -> None:
        super().__init__(
            f"Program size {size} exceeds available memory {capacity}"
        )
        self.size = size
        self.capacity = capacity


__all__ = [
    "Chip8Error",
    "AddressOutOfRangeError",
    "StackOverflowError",
    "StackUnderflowError",
    "UnsupportedOpcodeError",
    "ProgramTooLargeError",
]
