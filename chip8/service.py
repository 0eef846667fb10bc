"""Controller owning the program, its listing and the current executor."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from .config import MachineConfig
from .disassembler import ProgramListing
from .events import NotificationDispatcher, NotificationSink, RunStateChanged
from .loader import ProgramLoader
from .runner import ProgramExecutor

logger = logging.getLogger(__name__)

RESET_TIMEOUT_SECONDS = 5.0


class EmulatorService:
    """Manage one program and its background execution.

    Reset is a relaunch: the running executor is stopped and awaited, then a
    fresh one starts with the same program, delay and pause flag.
    """

    def __init__(
        self,
        program: bytes,
        *,
        config: Optional[MachineConfig] = None,
        sinks: Iterable[NotificationSink] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or MachineConfig()
        self.program = bytes(program)
        self.listing = ProgramListing(self.program, self.config.program_start)
        self.dispatcher = NotificationDispatcher()
        self.dispatcher.register(self)
        for sink in sinks:
            self.dispatcher.register(sink)
        self._clock = clock
        self._lock = threading.RLock()
        self._delay_ms = self.config.instruction_delay_ms
        self._paused = False
        self._executor: Optional[ProgramExecutor] = None

    @classmethod
    def from_file(
        cls, path: Union[str, Path], *, config: Optional[MachineConfig] = None, **kwargs
    ) -> "EmulatorService":
        config = config or MachineConfig()
        program = ProgramLoader(config.program_start).load(path)
        return cls(program, config=config, **kwargs)

    # ------------------------------------------------------------------ #
    # Notification tracking
    # ------------------------------------------------------------------ #
    def handle_event(self, event: object) -> None:
        if isinstance(event, RunStateChanged):
            self._paused = event.paused

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def instruction_delay_ms(self) -> float:
        return self._delay_ms

    @property
    def executor(self) -> Optional[ProgramExecutor]:
        with self._lock:
            return self._executor

    def _require_executor(self) -> ProgramExecutor:
        executor = self.executor
        if executor is None:
            raise RuntimeError("Emulator not started")
        return executor

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def start(self, paused: bool = False) -> ProgramExecutor:
        with self._lock:
            if self._executor is not None and not self._executor.stopped:
                raise RuntimeError("Emulator already running")
            self._paused = paused
            self._executor = self._launch(paused)
            return self._executor

    def _launch(self, paused: bool) -> ProgramExecutor:
        executor = ProgramExecutor(
            self.program,
            config=self.config,
            sink=self.dispatcher,
            paused=paused,
            clock=self._clock,
        )
        executor.set_instruction_delay(self._delay_ms)
        executor.start()
        logger.info(
            "Started %d byte program (delay %s ms, paused=%s)",
            len(self.program),
            self._delay_ms,
            paused,
        )
        return executor

    def reset(self, timeout: float = RESET_TIMEOUT_SECONDS) -> ProgramExecutor:
        """Stop the current run and relaunch the program from scratch."""
        with self._lock:
            pause_flag = self._paused
            executor = self._require_executor()
            executor.pause(False)
            executor.stop()
            if not executor.wait(timeout):
                raise TimeoutError("Executor did not stop within the reset timeout")
            self._executor = self._launch(pause_flag)
        if pause_flag:
            # The fresh executor starts paused silently; announce it again.
            self.dispatcher.handle_event(RunStateChanged(paused=True))
        return self._executor

    def close(self, timeout: Optional[float] = RESET_TIMEOUT_SECONDS) -> None:
        with self._lock:
            executor = self._executor
        if executor is None:
            return
        executor.pause(False)
        executor.stop()
        executor.wait(timeout)

    def __enter__(self) -> "EmulatorService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Forwarded controls
    # ------------------------------------------------------------------ #
    def pause(self, flag: bool) -> None:
        self._require_executor().pause(flag)

    def toggle_pause(self) -> None:
        self._require_executor().toggle_pause()

    def step(self) -> bool:
        return self._require_executor().step()

    def set_instruction_delay(self, delay_ms: float) -> None:
        if delay_ms < 0:
            raise ValueError(f"Instruction delay must be non-negative: {delay_ms!r}")
        self._delay_ms = delay_ms
        executor = self.executor
        if executor is not None:
            executor.set_instruction_delay(delay_ms)

    def key_down(self, key: int) -> None:
        self._require_executor().key_down(key)

    def key_up(self, key: int) -> None:
        self._require_executor().key_up(key)

    def enable_extended_screen_mode(self) -> None:
        self._require_executor().enable_extended_screen_mode()

    def current_listing_row(self) -> Optional[int]:
        """Listing row of the instruction about to execute."""
        executor = self._require_executor()
        return self.listing.index_of(executor.emulator.state.pc)


__all__ = ["EmulatorService"]
