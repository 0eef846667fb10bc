from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class Instruction(str, Enum):
    """CHIP-8 and SUPER-CHIP instruction kinds.

    The value is the human readable name used in program listings.
    """

    SCROLL_DOWN = "scroll down"
    CLEAR_SCREEN = "clear screen"
    RETURN = "return"
    SCROLL_RIGHT = "scroll right"
    SCROLL_LEFT = "scroll left"
    EXIT = "exit"
    LOW_RES = "low resolution"
    HIGH_RES = "high resolution"
    SYS = "system call"
    JUMP = "jump"
    CALL = "call"
    SKIP_EQ_IMM = "skip if equal"
    SKIP_NE_IMM = "skip if not equal"
    SKIP_EQ_REG = "skip if registers equal"
    LOAD_IMM = "load"
    ADD_IMM = "add"
    LOAD_REG = "copy"
    OR = "or"
    AND = "and"
    XOR = "xor"
    ADD_REG = "add with carry"
    SUB = "subtract"
    SHR = "shift right"
    SUBN = "subtract reversed"
    SHL = "shift left"
    SKIP_NE_REG = "skip if registers not equal"
    LOAD_INDEX = "load index"
    JUMP_V0 = "jump plus V0"
    RANDOM = "random"
    DRAW = "draw"
    SKIP_KEY = "skip if key pressed"
    SKIP_NOT_KEY = "skip if key not pressed"
    LOAD_DELAY = "read delay timer"
    WAIT_KEY = "wait for key"
    SET_DELAY = "set delay timer"
    SET_SOUND = "set sound timer"
    ADD_INDEX = "add to index"
    LOAD_FONT = "load font glyph"
    LOAD_LARGE_FONT = "load large font glyph"
    STORE_BCD = "store bcd"
    STORE_REGISTERS = "store registers"
    LOAD_REGISTERS = "load registers"
    STORE_FLAGS = "store flags"
    LOAD_FLAGS = "load flags"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class RegSel:
    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index <= 0xF:
            raise ValueError(f"Register index out of range: {self.index:#x}")

    @property
    def name(self) -> str:
        return f"V{self.index:X}"


@dataclass(frozen=True, slots=True)
class Imm8:
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFF:
            raise ValueError(f"Imm8 out of range: {self.value:#x}")


@dataclass(frozen=True, slots=True)
class Addr12:
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFF:
            raise ValueError(f"Addr12 out of range: {self.value:#x}")


@dataclass(frozen=True, slots=True)
class Nibble:
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xF:
            raise ValueError(f"Nibble out of range: {self.value:#x}")


@dataclass(frozen=True, slots=True)
class RawWord:
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFF:
            raise ValueError(f"Opcode word out of range: {self.value:#x}")


@dataclass(frozen=True, slots=True)
class DecodedInstr:
    opcode: int
    instruction: Instruction
    binds: Dict[str, object] = field(default_factory=dict)
    family: Optional[str] = None

    @property
    def name(self) -> str:
        return self.instruction.value

    @property
    def supported(self) -> bool:
        return self.instruction is not Instruction.UNSUPPORTED

    def operands(self) -> tuple[object, ...]:
        return tuple(self.binds.values())
