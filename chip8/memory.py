"""Flat 4 KiB CHIP-8 address space with the built-in font sets."""

from __future__ import annotations

from typing import Iterable

from .errors import AddressOutOfRangeError, ProgramTooLargeError

MEMORY_SIZE = 0x1000
PROGRAM_START = 0x200

# Small 4x5 hexadecimal digits (0-F), 5 bytes per glyph.
FONT_ADDRESS = 0x000
FONT_GLYPH_SIZE = 5
FONT_SET = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)

# SUPER-CHIP 8x10 decimal digits (0-9), 10 bytes per glyph.
LARGE_FONT_ADDRESS = 0x0A0
LARGE_FONT_GLYPH_SIZE = 10
LARGE_FONT_SET = bytes(
    [
        0x3C, 0x7E, 0xE7, 0xC3, 0xC3, 0xC3, 0xC3, 0xE7, 0x7E, 0x3C,  # 0
        0x18, 0x38, 0x58, 0x18, 0x18, 0x18, 0x18, 0x18, 0x18, 0x3C,  # 1
        0x3E, 0x7F, 0xC3, 0x06, 0x0C, 0x18, 0x30, 0x60, 0xFF, 0xFF,  # 2
        0x3C, 0x7E, 0xC3, 0x03, 0x0E, 0x0E, 0x03, 0xC3, 0x7E, 0x3C,  # 3
        0x06, 0x0E, 0x1E, 0x36, 0x66, 0xC6, 0xFF, 0xFF, 0x06, 0x06,  # 4
        0xFF, 0xFF, 0xC0, 0xC0, 0xFC, 0xFE, 0x03, 0xC3, 0x7E, 0x3C,  # 5
        0x3E, 0x7C, 0xC0, 0xC0, 0xFC, 0xFE, 0xC3, 0xC3, 0x7E, 0x3C,  # 6
        0xFF, 0xFF, 0x03, 0x06, 0x0C, 0x18, 0x30, 0x60, 0x60, 0x60,  # 7
        0x3C, 0x7E, 0xC3, 0xC3, 0x7E, 0x7E, 0xC3, 0xC3, 0x7E, 0x3C,  # 8
        0x3C, 0x7E, 0xC3, 0xC3, 0x7F, 0x3F, 0x03, 0x03, 0x3E, 0x7C,  # 9
    ]
)


class Memory:
    """Byte-addressable RAM. Every access is bounds-checked."""

    def __init__(self, size: int = MEMORY_SIZE) -> None:
        self.size = size
        self._data = bytearray(size)

    def _check(self, address: int) -> None:
        if not 0 <= address < self.size:
            raise AddressOutOfRangeError(address, self.size)

    def read(self, address: int) -> int:
        self._check(address)
        return self._data[address]

    def write(self, address: int, value: int) -> None:
        self._check(address)
        self._data[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit opcode."""
        self._check(address)
        self._check(address + 1)
        return (self._data[address] << 8) | self._data[address + 1]

    def read_block(self, address: int, length: int) -> bytes:
        if length <= 0:
            return b""
        self._check(address)
        self._check(address + length - 1)
        return bytes(self._data[address : address + length])

    def write_block(self, address: int, values: Iterable[int]) -> None:
        data = bytes(value & 0xFF for value in values)
        if not data:
            return
        self._check(address)
        self._check(address + len(data) - 1)
        self._data[address : address + len(data)] = data

    def load_font_set(self) -> None:
        """Copy both font sets into the reserved interpreter area."""
        self.write_block(FONT_ADDRESS, FONT_SET)
        self.write_block(LARGE_FONT_ADDRESS, LARGE_FONT_SET)

    def load_program(self, program: bytes, start_address: int = PROGRAM_START) -> None:
        capacity = self.size - start_address
        if len(program) > capacity:
            raise ProgramTooLargeError(len(program), capacity)
        self.write_block(start_address, program)

    def clear(self) -> None:
        self._data[:] = bytes(self.size)

    def dump(self) -> bytes:
        return bytes(self._data)

    def __len__(self) -> int:
        return self.size


__all__ = [
    "Memory",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "FONT_ADDRESS",
    "FONT_GLYPH_SIZE",
    "FONT_SET",
    "LARGE_FONT_ADDRESS",
    "LARGE_FONT_GLYPH_SIZE",
    "LARGE_FONT_SET",
]
