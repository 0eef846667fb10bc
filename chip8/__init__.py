"""CHIP-8 / SUPER-CHIP emulator package."""

from .config import MachineConfig
from .disassembler import ProgramListing, disassemble, format_instruction
from .emulator import Chip8Emulator
from .errors import (
    AddressOutOfRangeError,
    Chip8Error,
    ProgramTooLargeError,
    StackOverflowError,
    StackUnderflowError,
    UnsupportedOpcodeError,
)
from .loader import ProgramLoader
from .runner import ProgramExecutor, RunState
from .service import EmulatorService
from .state_model import (
    CPUState,
    FieldDiff,
    KeypadState,
    MachineSnapshot,
    MachineState,
    TimerState,
    capture_state,
    diff_cpu,
    diff_timers,
)

__all__ = [
    "Chip8Emulator",
    "EmulatorService",
    "ProgramExecutor",
    "RunState",
    "ProgramLoader",
    "ProgramListing",
    "disassemble",
    "format_instruction",
    "MachineConfig",
    "MachineState",
    "CPUState",
    "TimerState",
    "KeypadState",
    "MachineSnapshot",
    "FieldDiff",
    "capture_state",
    "diff_cpu",
    "diff_timers",
    "Chip8Error",
    "AddressOutOfRangeError",
    "StackOverflowError",
    "StackUnderflowError",
    "UnsupportedOpcodeError",
    "ProgramTooLargeError",
]
