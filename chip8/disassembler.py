"""Linear-sweep disassembler producing the program listing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .decoding import (
    Addr12,
    DecodedInstr,
    Imm8,
    Nibble,
    RawWord,
    RegSel,
    WordReader,
    decode_word,
)
from .memory import PROGRAM_START


@dataclass(frozen=True)
class ListingEntry:
    """One decoded word of the program image."""

    address: int
    decoded: DecodedInstr

    @property
    def text(self) -> str:
        return format_instruction(self.decoded)

    def render(self) -> str:
        return f"{self.address:03X}: #{self.decoded.opcode:04X} - {self.text}"


def format_operand(operand: object) -> str:
    if isinstance(operand, RegSel):
        return operand.name
    if isinstance(operand, Imm8):
        return f"0x{operand.value:02X}"
    if isinstance(operand, Addr12):
        return f"0x{operand.value:03X}"
    if isinstance(operand, RawWord):
        return f"0x{operand.value:04X}"
    if isinstance(operand, Nibble):
        return str(operand.value)
    return str(operand)


def format_instruction(decoded: DecodedInstr) -> str:
    """Render ``decoded`` as ``"<name> <op>, <op>"``, e.g. ``"jump 0x228"``."""
    operands = ", ".join(format_operand(op) for op in decoded.operands())
    if not operands:
        return decoded.name
    return f"{decoded.name} {operands}"


def iter_disassembly(
    buffer: bytes, start_address: int = PROGRAM_START
) -> Iterator[ListingEntry]:
    reader = WordReader(data=bytes(buffer), base_address=start_address)
    while not reader.at_end():
        address = reader.address()
        yield ListingEntry(address=address, decoded=decode_word(reader.read_word()))


def disassemble(
    buffer: bytes, start_address: int = PROGRAM_START
) -> Tuple[ListingEntry, ...]:
    """Decode every word of ``buffer`` in order without following control flow.

    Never raises on unknown words: they appear as ``unsupported`` entries since
    a static sweep also walks over sprite data and other non-code bytes.
    """
    return tuple(iter_disassembly(buffer, start_address))


class ProgramListing:
    """Immutable listing of a loaded program, consumed by debug displays."""

    def __init__(self, buffer: bytes, start_address: int = PROGRAM_START) -> None:
        self._start = start_address
        self._entries = disassemble(buffer, start_address)

    @property
    def entries(self) -> Tuple[ListingEntry, ...]:
        return self._entries

    @property
    def start_address(self) -> int:
        return self._start

    def lines(self) -> Tuple[str, ...]:
        return tuple(entry.render() for entry in self._entries)

    def index_of(self, pc: int) -> Optional[int]:
        """Return the listing row for ``pc``; None outside the program."""
        if pc < self._start or (pc - self._start) % 2:
            return None
        index = (pc - self._start) // 2
        if index >= len(self._entries):
            return None
        return index

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ListingEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> ListingEntry:
        return self._entries[index]


__all__ = [
    "ListingEntry",
    "ProgramListing",
    "disassemble",
    "format_instruction",
    "format_operand",
    "iter_disassembly",
]
