"""Deadline scheduling for the 60 Hz timer and the instruction clock."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TimerScheduler:
    """Deterministic periodic scheduler driven by a monotonic clock value.

    ``advance`` reports how many whole periods elapsed since the last call so
    the caller can catch up after a late wake-up without drifting.
    """

    period: float

    def __post_init__(self) -> None:
        self.period = float(self.period)
        if self.period <= 0:
            raise ValueError("Scheduler period must be positive")
        self._next_deadline = self.period

    def reset(self, now: float = 0.0) -> None:
        """Restart counting so the first period ends at ``now + period``."""

        self._next_deadline = now + self.period

    def advance(self, now: float) -> int:
        """Advance to ``now`` and return the number of elapsed periods."""

        fired = 0
        while now >= self._next_deadline:
            self._next_deadline += self.period
            fired += 1
        return fired

    @property
    def next_deadline(self) -> float:
        return self._next_deadline


@dataclass
class InstructionClock:
    """Pacing for instruction execution with a mutable delay.

    A zero delay means "as fast as possible"; the clock is then always due.
    """

    delay: float
    paused: bool = False

    def __post_init__(self) -> None:
        self.delay = float(self.delay)
        self._next_deadline = 0.0

    def reset(self, now: float = 0.0) -> None:
        self._next_deadline = now

    def set_delay(self, delay: float, now: float) -> None:
        self.delay = float(delay)
        self._next_deadline = now + self.delay

    def due(self, now: float) -> bool:
        return not self.paused and now >= self._next_deadline

    def consume(self, now: float) -> None:
        """Mark one instruction as executed at ``now``."""

        deadline = self._next_deadline + self.delay
        # More than one delay behind: drop the backlog instead of bursting.
        if deadline < now:
            deadline = now + self.delay
        self._next_deadline = deadline

    @property
    def next_deadline(self) -> float:
        return self._next_deadline


__all__ = ["TimerScheduler", "InstructionClock"]
