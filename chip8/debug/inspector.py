"""Memory inspection utilities for the CHIP-8 emulator."""

from typing import List, Optional

from ..memory import Memory


class MemoryInspector:
    """Memory inspection and debugging utilities."""

    def __init__(self, memory: Memory):
        self.memory = memory

    def dump_memory(self, start: int, length: int, width: int = 16) -> str:
        """Dump memory in hex format."""
        lines = []

        for offset in range(0, length, width):
            addr = start + offset
            count = min(width, length - offset)
            chunk = self.memory.read_block(addr, count)
            hex_part = "".join(f"{byte:02X} " for byte in chunk)
            ascii_part = "".join(
                chr(byte) if 0x20 <= byte <= 0x7E else "." for byte in chunk
            )
            lines.append(
                f"{addr:03X}: " + hex_part.ljust(width * 3 + 1) + "|" + ascii_part + "|"
            )

        return "\n".join(lines)

    def find_pattern(
        self, pattern: List[Optional[int]], start: int = 0, end: Optional[int] = None
    ) -> List[int]:
        """Find byte pattern in memory (None = wildcard)."""
        end = len(self.memory) if end is None else end
        data = self.memory.read_block(start, end - start)
        addresses = []

        for offset in range(len(data) - len(pattern) + 1):
            if all(
                byte is None or data[offset + i] == byte
                for i, byte in enumerate(pattern)
            ):
                addresses.append(start + offset)

        return addresses

    def watch_memory(self, address: int, length: int = 1) -> bytes:
        """Read memory region for watching."""
        return self.memory.read_block(address, length)
