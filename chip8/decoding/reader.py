from __future__ import annotations

from dataclasses import dataclass


@dataclass
class WordReader:
    """
    Sequential big-endian reader over a program buffer.

    `base_address` is the emulated address of `data[0]`, so callers can report
    where each word lives without tracking offsets themselves. A trailing odd
    byte reads as if followed by 0x00, which is what zero-filled memory holds.
    """

    data: bytes
    base_address: int = 0x200
    idx: int = 0

    def _require(self, count: int) -> None:
        if self.idx + count > len(self.data):
            raise ValueError(
                f"Insufficient bytes: need {count}, "
                f"have {len(self.data) - self.idx} remaining"
            )

    def read_u8(self) -> int:
        self._require(1)
        value = self.data[self.idx]
        self.idx += 1
        return value

    def read_word(self) -> int:
        hi = self.read_u8()
        lo = self.read_u8() if self.remaining() else 0x00
        return (hi << 8) | lo

    def address(self) -> int:
        return self.base_address + self.idx

    def bytes_consumed(self) -> int:
        return self.idx

    def remaining(self) -> int:
        return len(self.data) - self.idx

    def at_end(self) -> bool:
        return self.idx >= len(self.data)
