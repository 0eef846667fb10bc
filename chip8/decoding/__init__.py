"""
Typed decoding helpers for CHIP-8 opcode words.

Decoding is pure so the same tables serve the static disassembler and the
executor fetching one word at a time.
"""

from .bind import (  # noqa: F401
    Addr12,
    DecodedInstr,
    Imm8,
    Instruction,
    Nibble,
    RawWord,
    RegSel,
)
from .reader import WordReader  # noqa: F401
from .decode_map import decode_word  # noqa: F401
from . import decode_map  # noqa: F401

__all__ = [
    "Addr12",
    "DecodedInstr",
    "Imm8",
    "Instruction",
    "Nibble",
    "RawWord",
    "RegSel",
    "WordReader",
    "decode_word",
    "decode_map",
]
