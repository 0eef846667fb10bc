"""Machine state, canonical snapshots and diff utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .display import DisplayBuffer, DisplaySnapshot
from .errors import StackOverflowError, StackUnderflowError
from .keypad import Keypad
from .memory import Memory, PROGRAM_START

REGISTER_COUNT = 16
FLAG_REGISTER = 0xF
RPL_FLAG_COUNT = 8


class ReturnStack:
    """Bounded stack of subroutine return addresses."""

    def __init__(self, depth: int = 16) -> None:
        self.depth = depth
        self._frames: List[int] = []

    def push(self, address: int) -> None:
        if len(self._frames) >= self.depth:
            raise StackOverflowError(self.depth)
        self._frames.append(address)

    def pop(self) -> int:
        if not self._frames:
            raise StackUnderflowError()
        return self._frames.pop()

    def clear(self) -> None:
        self._frames.clear()

    def frames(self) -> Tuple[int, ...]:
        return tuple(self._frames)

    def __len__(self) -> int:
        return len(self._frames)


class MachineState:
    """All mutable CHIP-8 state.

    Only the instruction executor and the timer tick mutate it; everything
    else reads copies through :func:`capture_state`.
    """

    def __init__(
        self, *, stack_depth: int = 16, program_start: int = PROGRAM_START
    ) -> None:
        self.program_start = program_start
        self.memory = Memory()
        self.v = bytearray(REGISTER_COUNT)
        self.index = 0
        self.pc = program_start
        self.stack = ReturnStack(stack_depth)
        self.delay_timer = 0
        self.sound_timer = 0
        self.display = DisplayBuffer()
        self.keypad = Keypad()
        self.rpl_flags = bytearray(RPL_FLAG_COUNT)
        # Register index parked by Fx0A, None while the clock runs freely.
        self.key_wait_register: Optional[int] = None
        self.halted = False
        self.memory.load_font_set()

    def reset(self) -> None:
        """Restore power-on values and the font set; the program is not reloaded."""
        self.memory.clear()
        self.memory.load_font_set()
        self.v = bytearray(REGISTER_COUNT)
        self.index = 0
        self.pc = self.program_start
        self.stack.clear()
        self.delay_timer = 0
        self.sound_timer = 0
        self.display.reset()
        self.keypad.release_all_keys()
        self.rpl_flags = bytearray(RPL_FLAG_COUNT)
        self.key_wait_register = None
        self.halted = False

    @property
    def waiting_for_key(self) -> bool:
        return self.key_wait_register is not None

    def set_register(self, index: int, value: int) -> None:
        self.v[index] = value & 0xFF

    def set_flag(self, value: int) -> None:
        self.v[FLAG_REGISTER] = 1 if value else 0

    def tick_timers(self) -> None:
        """One 60 Hz tick: decrement nonzero timers, clamping at zero."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1


@dataclass(frozen=True)
class CPUState:
    """Registers, index, program counter and return stack."""

    registers: Tuple[int, ...]
    index: int
    pc: int
    stack: Tuple[int, ...]


@dataclass(frozen=True)
class TimerState:
    delay: int
    sound: int


@dataclass(frozen=True)
class KeypadState:
    pressed_keys: Tuple[int, ...]
    waiting_register: Optional[int]


@dataclass(frozen=True)
class MachineSnapshot:
    """Composite immutable snapshot of machine subsystems."""

    cpu: CPUState
    timers: TimerState
    keypad: KeypadState
    display: DisplaySnapshot


@dataclass(frozen=True)
class FieldDiff:
    """Difference for a single named field."""

    name: str
    before: object
    after: object


def capture_cpu_state(state: MachineState) -> CPUState:
    return CPUState(
        registers=tuple(state.v),
        index=state.index,
        pc=state.pc,
        stack=state.stack.frames(),
    )


def capture_timer_state(state: MachineState) -> TimerState:
    return TimerState(delay=state.delay_timer, sound=state.sound_timer)


def capture_state(state: MachineState) -> MachineSnapshot:
    """Capture the current machine state as a canonical snapshot."""

    return MachineSnapshot(
        cpu=capture_cpu_state(state),
        timers=capture_timer_state(state),
        keypad=KeypadState(
            pressed_keys=state.keypad.get_pressed_keys(),
            waiting_register=state.key_wait_register,
        ),
        display=state.display.snapshot(),
    )


def diff_cpu(before: CPUState, after: CPUState) -> Tuple[FieldDiff, ...]:
    diffs: list[FieldDiff] = []
    for index, (previous, current) in enumerate(
        zip(before.registers, after.registers)
    ):
        if previous != current:
            diffs.append(FieldDiff(f"v{index:x}", previous, current))
    if before.index != after.index:
        diffs.append(FieldDiff("index", before.index, after.index))
    if before.pc != after.pc:
        diffs.append(FieldDiff("pc", before.pc, after.pc))
    if before.stack != after.stack:
        diffs.append(FieldDiff("stack", before.stack, after.stack))
    return tuple(diffs)


def diff_timers(before: TimerState, after: TimerState) -> Tuple[FieldDiff, ...]:
    diffs: list[FieldDiff] = []
    if before.delay != after.delay:
        diffs.append(FieldDiff("delay", before.delay, after.delay))
    if before.sound != after.sound:
        diffs.append(FieldDiff("sound", before.sound, after.sound))
    return tuple(diffs)


__all__ = [
    "MachineState",
    "ReturnStack",
    "CPUState",
    "TimerState",
    "KeypadState",
    "MachineSnapshot",
    "FieldDiff",
    "capture_cpu_state",
    "capture_timer_state",
    "capture_state",
    "diff_cpu",
    "diff_timers",
    "REGISTER_COUNT",
    "FLAG_REGISTER",
]
