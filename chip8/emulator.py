"""Synchronous CHIP-8 core: fetch, decode, execute and the 60 Hz tick."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from .config import MachineConfig
from .decoding import decode_word
from .errors import Chip8Error
from .events import (
    DelayTimerChanged,
    IndexRegisterChanged,
    NotificationSink,
    PlaySound,
    ProgramCounterChanged,
    RegisterChanged,
    ScreenRefresh,
    SoundTimerChanged,
)
from .instructions import InstructionExecutor
from .state_model import (
    FieldDiff,
    MachineSnapshot,
    MachineState,
    capture_cpu_state,
    capture_state,
    capture_timer_state,
    diff_cpu,
    diff_timers,
)

logger = logging.getLogger(__name__)


class Chip8Emulator:
    """One CHIP-8 machine with a loaded program.

    Not thread-safe; :class:`chip8.runner.ProgramExecutor` serialises access.
    Every state change is reported to ``sink`` as an immutable notification.
    """

    def __init__(
        self,
        program: bytes = b"",
        *,
        config: Optional[MachineConfig] = None,
        sink: Optional[NotificationSink] = None,
    ) -> None:
        self.config = config or MachineConfig()
        self.sink = sink
        self.state = MachineState(
            stack_depth=self.config.stack_depth,
            program_start=self.config.program_start,
        )
        self.executor = InstructionExecutor(self.state, self.config)
        self.program = b""
        self.instruction_count = 0
        self._sound_idle = True
        self.load_program(program)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def load_program(self, program: bytes) -> None:
        """Reset the machine and copy ``program`` to the program start."""
        program = bytes(program)
        self.state.reset()
        self.state.memory.load_program(program, self.config.program_start)
        self.program = program
        self.instruction_count = 0
        self._sound_idle = True
        logger.debug(
            "Loaded %d byte program at 0x%03X", len(program), self.config.program_start
        )

    def reset(self) -> None:
        """Power-on reset; the held program is copied in again."""
        self.load_program(self.program)
        self._emit(ScreenRefresh(self.state.display.snapshot()))

    @property
    def halted(self) -> bool:
        return self.state.halted

    @property
    def waiting_for_key(self) -> bool:
        return self.state.waiting_for_key

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #
    def step(self) -> bool:
        """Execute one instruction.

        Returns False without doing anything while halted or parked on a
        key wait. Core errors propagate to the caller.
        """
        state = self.state
        if state.halted or state.waiting_for_key:
            return False

        pc = state.pc
        decoded = decode_word(state.memory.read_word(pc))
        cpu_before = capture_cpu_state(state)
        timers_before = capture_timer_state(state)

        state.pc = (pc + 2) & 0xFFFF
        try:
            outcome = self.executor.execute(decoded, pc)
        except Chip8Error:
            # A faulting instruction leaves PC on itself.
            state.pc = pc
            raise
        self.instruction_count += 1

        self._publish_diffs(diff_cpu(cpu_before, capture_cpu_state(state)))
        self._publish_diffs(diff_timers(timers_before, capture_timer_state(state)))
        if outcome.redraw:
            self._emit(ScreenRefresh(state.display.snapshot()))
        if outcome.halted:
            logger.info("Program exited at 0x%03X", pc)
            return False
        return True

    def run(self, max_instructions: Optional[int] = None) -> int:
        count = 0
        while max_instructions is None or count < max_instructions:
            if not self.step():
                break
            count += 1
        return count

    def tick_timers(self) -> None:
        """One 60 Hz tick of the delay and sound timers."""
        state = self.state
        before = capture_timer_state(state)
        if state.sound_timer > 0 and self._sound_idle:
            self._emit(PlaySound())
        state.tick_timers()
        # The beep is over once a tick leaves the timer at zero.
        self._sound_idle = state.sound_timer == 0
        self._publish_diffs(diff_timers(before, capture_timer_state(state)))

    # ------------------------------------------------------------------ #
    # Collaborator requests
    # ------------------------------------------------------------------ #
    def press_key(self, key: int) -> bool:
        """Mark ``key`` down; a pending key wait completes on the transition."""
        transition = self.state.keypad.press_key(key)
        register = self.state.key_wait_register
        if transition and register is not None:
            self.state.set_register(register, key)
            self.state.key_wait_register = None
            self._emit(RegisterChanged(register, key))
        return transition

    def release_key(self, key: int) -> bool:
        return self.state.keypad.release_key(key)

    def enable_extended_screen_mode(self) -> None:
        if self.state.display.enable_extended_mode():
            self._emit(ScreenRefresh(self.state.display.snapshot()))

    # ------------------------------------------------------------------ #
    # Inspection
    # ------------------------------------------------------------------ #
    def snapshot(self) -> MachineSnapshot:
        return capture_state(self.state)

    def get_cpu_state(self) -> Dict[str, Any]:
        state = self.state
        return {
            "pc": state.pc,
            "i": state.index,
            "v": list(state.v),
            "sp": len(state.stack),
            "stack": list(state.stack.frames()),
            "delay_timer": state.delay_timer,
            "sound_timer": state.sound_timer,
            "extended": state.display.extended,
            "waiting_for_key": state.waiting_for_key,
            "instructions": self.instruction_count,
        }

    def get_display_buffer(self):
        return self.state.display.get_display_buffer()

    # ------------------------------------------------------------------ #
    # Notifications
    # ------------------------------------------------------------------ #
    def _emit(self, event: object) -> None:
        if self.sink is not None:
            self.sink.handle_event(event)

    def _publish_diffs(self, diffs: Iterable[FieldDiff]) -> None:
        if self.sink is None:
            return
        for diff in diffs:
            event = _event_for_diff(diff)
            if event is not None:
                self._emit(event)


def _event_for_diff(diff: FieldDiff) -> Optional[object]:
    name = diff.name
    value = diff.after
    if name.startswith("v") and len(name) == 2:
        return RegisterChanged(int(name[1], 16), value)  # type: ignore[arg-type]
    if name == "index":
        return IndexRegisterChanged(value)  # type: ignore[arg-type]
    if name == "pc":
        return ProgramCounterChanged(value)  # type: ignore[arg-type]
    if name == "delay":
        return DelayTimerChanged(value)  # type: ignore[arg-type]
    if name == "sound":
        return SoundTimerChanged(value)  # type: ignore[arg-type]
    # Stack depth has no notification of its own.
    return None


__all__ = ["Chip8Emulator"]
