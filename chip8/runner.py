"""Background execution loop with pause, single-step and stop controls."""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional

from .config import MachineConfig
from .emulator import Chip8Emulator
from .errors import Chip8Error
from .events import BufferedSink, ExecutionStopped, NotificationSink, RunStateChanged
from .scheduler import InstructionClock, TimerScheduler

logger = logging.getLogger(__name__)

# Upper bound on instructions per pump so timer ticks and controls still
# interleave when the instruction delay is zero.
MAX_INSTRUCTIONS_PER_PUMP = 1_000
IDLE_WAIT_SECONDS = 0.1
WORKER_THREAD_NAME = "chip8-worker"


class RunState(Enum):
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class ProgramExecutor:
    """Runs one program on a dedicated worker thread.

    The worker interleaves 60 Hz timer ticks between instructions. All
    machine access happens under one lock; notifications raised while it is
    held are buffered and handed to ``sink`` after it is released. STOPPED
    is terminal: a fresh executor is needed to run again.
    """

    def __init__(
        self,
        program: bytes,
        *,
        config: Optional[MachineConfig] = None,
        sink: Optional[NotificationSink] = None,
        paused: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or MachineConfig()
        self._sink = sink
        self._clock = clock
        self._lock = threading.RLock()
        self._wakeup = threading.Condition(self._lock)
        self._finished = threading.Event()
        self._pending = BufferedSink()
        self.emulator = Chip8Emulator(program, config=self.config, sink=self._pending)
        self._timers = TimerScheduler(self.config.timer_period)
        self._instructions = InstructionClock(
            self.config.instruction_delay_ms / 1000.0, paused=paused
        )
        self._state = RunState.PAUSED if paused else RunState.RUNNING
        self._thread: Optional[threading.Thread] = None
        self._finish_claimed = False
        self.error: Optional[Chip8Error] = None
        self._reset_clocks(self._clock())

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def start(self) -> None:
        """Launch the worker thread."""
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("Executor already started")
            if self._state is RunState.STOPPED:
                raise RuntimeError("Executor already stopped")
            self._reset_clocks(self._clock())
            self._thread = threading.Thread(
                target=self._worker, name=WORKER_THREAD_NAME, daemon=True
            )
            self._thread.start()

    def stop(self) -> None:
        """Request termination; returns without waiting for the worker."""
        with self._lock:
            if self._state is RunState.STOPPED:
                return
            self._state = RunState.STOPPED
            self._wakeup.notify_all()
        self._release([])

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the worker has fully released the machine."""
        return self._finished.wait(timeout)

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def paused(self) -> bool:
        return self.state is RunState.PAUSED

    @property
    def stopped(self) -> bool:
        return self.state is RunState.STOPPED

    @property
    def instruction_delay_ms(self) -> float:
        with self._lock:
            return self._instructions.delay * 1000.0

    # ------------------------------------------------------------------ #
    # Controls
    # ------------------------------------------------------------------ #
    def pause(self, flag: bool) -> None:
        with self._lock:
            if self._state is RunState.STOPPED:
                return
            target = RunState.PAUSED if flag else RunState.RUNNING
            if target is not self._state:
                self._state = target
                self._instructions.paused = flag
                if not flag:
                    self._instructions.reset(self._clock())
                self._pending.handle_event(RunStateChanged(paused=flag))
                self._wakeup.notify_all()
            events = self._pending.drain()
        self._release(events)

    def toggle_pause(self) -> None:
        with self._lock:
            flag = self._state is not RunState.PAUSED
        self.pause(flag)

    def step(self) -> bool:
        """Execute exactly one instruction while paused."""
        with self._lock:
            if self._state is not RunState.PAUSED:
                return False
            executed = self._execute_one()
            events = self._pending.drain()
        self._release(events)
        return executed

    def set_instruction_delay(self, delay_ms: float) -> None:
        if delay_ms < 0:
            raise ValueError(f"Instruction delay must be non-negative: {delay_ms!r}")
        with self._lock:
            self._instructions.set_delay(delay_ms / 1000.0, self._clock())
            self._wakeup.notify_all()
        logger.debug("Instruction delay set to %s ms", delay_ms)

    def key_down(self, key: int) -> None:
        with self._lock:
            self.emulator.press_key(key)
            self._wakeup.notify_all()
            events = self._pending.drain()
        self._release(events)

    def key_up(self, key: int) -> None:
        with self._lock:
            self.emulator.release_key(key)

    def enable_extended_screen_mode(self) -> None:
        with self._lock:
            self.emulator.enable_extended_screen_mode()
            events = self._pending.drain()
        self._release(events)

    # ------------------------------------------------------------------ #
    # Scheduling
    # ------------------------------------------------------------------ #
    def pump(self, now: float) -> Optional[float]:
        """Advance both clocks to ``now``.

        Returns the time of the next due event, or None once stopped.
        """
        with self._lock:
            deadline = self._pump_locked(now)
            events = self._pending.drain()
        self._release(events)
        return deadline

    def _pump_locked(self, now: float) -> Optional[float]:
        if self._state is RunState.STOPPED:
            return None

        for _ in range(self._timers.advance(now)):
            self.emulator.tick_timers()

        executed = 0
        while (
            self._state is RunState.RUNNING
            and not self.emulator.waiting_for_key
            and executed < MAX_INSTRUCTIONS_PER_PUMP
            and self._instructions.due(now)
        ):
            self._instructions.consume(now)
            self._execute_one()
            executed += 1

        if self._state is RunState.STOPPED:
            return None
        deadline = self._timers.next_deadline
        if self._state is RunState.RUNNING and not self.emulator.waiting_for_key:
            deadline = min(deadline, self._instructions.next_deadline)
        return deadline

    def _execute_one(self) -> bool:
        count = self.emulator.instruction_count
        try:
            self.emulator.step()
        except Chip8Error as exc:
            self.error = exc
            self._state = RunState.STOPPED
            logger.error(
                "Execution stopped at 0x%03X: %s", self.emulator.state.pc, exc
            )
            return False
        if self.emulator.halted:
            self._state = RunState.STOPPED
        return self.emulator.instruction_count != count

    def _reset_clocks(self, now: float) -> None:
        self._timers.reset(now)
        self._instructions.reset(now)

    # ------------------------------------------------------------------ #
    # Worker
    # ------------------------------------------------------------------ #
    def _worker(self) -> None:
        logger.debug("Worker started")
        try:
            while True:
                deadline = self.pump(self._clock())
                with self._wakeup:
                    if self._state is RunState.STOPPED or deadline is None:
                        break
                    timeout = min(deadline - self._clock(), IDLE_WAIT_SECONDS)
                    if timeout > 0:
                        self._wakeup.wait(timeout)
        finally:
            with self._lock:
                self._finish_claimed = True
            self._finish()
            logger.debug("Worker finished")

    def _finish(self) -> None:
        try:
            self._deliver([ExecutionStopped(self.error)])
        finally:
            self._finished.set()

    def _release(self, events: List[object]) -> None:
        """Deliver buffered events; a stop without a worker finishes here."""
        self._deliver(events)
        with self._lock:
            finish = (
                self._state is RunState.STOPPED
                and self._thread is None
                and not self._finish_claimed
            )
            if finish:
                self._finish_claimed = True
        if finish:
            self._finish()

    def _deliver(self, events: List[object]) -> None:
        if self._sink is None:
            return
        for event in events:
            self._sink.handle_event(event)


__all__ = ["ProgramExecutor", "RunState", "MAX_INSTRUCTIONS_PER_PUMP"]
