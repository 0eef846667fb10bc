"""Notifications published by the emulator core and their sinks."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol

from .display import DisplaySnapshot


@dataclass(frozen=True)
class ScreenRefresh:
    """A new frame is available."""

    snapshot: DisplaySnapshot


@dataclass(frozen=True)
class RegisterChanged:
    index: int
    value: int


@dataclass(frozen=True)
class IndexRegisterChanged:
    value: int


@dataclass(frozen=True)
class DelayTimerChanged:
    value: int


@dataclass(frozen=True)
class SoundTimerChanged:
    value: int


@dataclass(frozen=True)
class ProgramCounterChanged:
    value: int


@dataclass(frozen=True)
class PlaySound:
    """Start of a beep: the sound timer became nonzero."""


@dataclass(frozen=True)
class RunStateChanged:
    paused: bool


@dataclass(frozen=True)
class ExecutionStopped:
    """The execution loop ended; ``error`` is None for a clean stop."""

    error: Optional[BaseException] = None


class NotificationSink(Protocol):
    """Interface for notification consumers."""

    def handle_event(self, event: object) -> None: ...


class NotificationDispatcher:
    """Dispatches notifications to registered sinks."""

    def __init__(self, sinks: Iterable[NotificationSink] = ()) -> None:
        self._sinks: List[NotificationSink] = []
        for sink in sinks:
            self.register(sink)

    def register(self, sink: NotificationSink) -> None:
        if sink not in self._sinks:
            self._sinks.append(sink)

    def unregister(self, sink: NotificationSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def sinks(self) -> Iterable[NotificationSink]:
        return tuple(self._sinks)

    def has_sinks(self) -> bool:
        return bool(self._sinks)

    def handle_event(self, event: object) -> None:
        for sink in tuple(self._sinks):
            sink.handle_event(event)


class BufferedSink:
    """Collects events so they can be delivered later, outside a lock."""

    def __init__(self) -> None:
        self._events: List[object] = []

    def handle_event(self, event: object) -> None:
        self._events.append(event)

    def drain(self) -> List[object]:
        events, self._events = self._events, []
        return events

    def __len__(self) -> int:
        return len(self._events)


class RecordingSink:
    """Thread-safe sink that keeps every event, mostly useful in tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: List[object] = []

    def handle_event(self, event: object) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[object]:
        with self._lock:
            return list(self._events)

    def of_type(self, event_type: type) -> List[object]:
        return [event for event in self.events if isinstance(event, event_type)]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class LatestFrameSink:
    """Keeps only the newest frame; intermediate frames are dropped.

    A renderer calls :meth:`take` at its own pace and never falls behind
    the emulator.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frame: Optional[DisplaySnapshot] = None
        self.frames_seen = 0

    def handle_event(self, event: object) -> None:
        if isinstance(event, ScreenRefresh):
            with self._lock:
                self._frame = event.snapshot
                self.frames_seen += 1

    def peek(self) -> Optional[DisplaySnapshot]:
        with self._lock:
            return self._frame

    def take(self) -> Optional[DisplaySnapshot]:
        """Return the pending frame once, or None when nothing new arrived."""
        with self._lock:
            frame, self._frame = self._frame, None
            return frame


__all__ = [
    "ScreenRefresh",
    "RegisterChanged",
    "IndexRegisterChanged",
    "DelayTimerChanged",
    "SoundTimerChanged",
    "ProgramCounterChanged",
    "PlaySound",
    "RunStateChanged",
    "ExecutionStopped",
    "NotificationSink",
    "NotificationDispatcher",
    "BufferedSink",
    "RecordingSink",
    "LatestFrameSink",
]
