# chip8/tracing/perfetto_tracing.py
import logging
import threading
import time
from typing import Any, Dict, Optional

from retrobus_perfetto import PerfettoTraceBuilder

from ..events import (
    DelayTimerChanged,
    ExecutionStopped,
    IndexRegisterChanged,
    PlaySound,
    ProgramCounterChanged,
    RegisterChanged,
    RunStateChanged,
    ScreenRefresh,
    SoundTimerChanged,
)

logger = logging.getLogger(__name__)

DEFAULT_TRACE_PATH = "chip8.perfetto-trace"


class PerfettoTracer:
    """
    Perfetto tracer using retrobus-perfetto protobuf format.
    Wall-clock timestamps via time.perf_counter().
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._enabled = False
        self._start = 0.0
        self._builder: Optional[PerfettoTraceBuilder] = None
        self._path: Optional[str] = None
        self._track_uuids: Dict[str, int] = {}
        self._counter_tracks: Dict[str, int] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _now_ns(self) -> int:
        return int((time.perf_counter() - self._start) * 1_000_000_000)

    def _ensure_track(self, name: str) -> int:
        with self._lock:
            if name in self._track_uuids:
                return self._track_uuids[name]
            if not self._builder:
                return 0
            uuid = self._builder.add_thread(name)
            self._track_uuids[name] = uuid
            return uuid

    def _ensure_counter_track(self, name: str, unit: str = "count") -> int:
        with self._lock:
            if name in self._counter_tracks:
                return self._counter_tracks[name]
            if not self._builder:
                return 0
            uuid = self._builder.add_counter_track(name, unit)
            self._counter_tracks[name] = uuid
            return uuid

    def start(self, path: str = DEFAULT_TRACE_PATH) -> None:
        """Start tracing to the specified file."""
        with self._lock:
            if self._enabled:
                return
            self._enabled = True
            self._path = path
            self._start = time.perf_counter()
            self._track_uuids.clear()
            self._counter_tracks.clear()
            self._builder = PerfettoTraceBuilder("CHIP-8 Emulator")
            for track in ("CPU", "Display", "Timers", "Control"):
                self._ensure_track(track)
            logger.info("Perfetto tracing to %s", path)

    def stop(self) -> None:
        """Stop tracing and save the file."""
        with self._lock:
            if not self._enabled or not self._builder:
                return
            path = self._path or DEFAULT_TRACE_PATH
            self._builder.save(path)
            logger.info("Perfetto trace saved to %s", path)
            self._enabled = False
            self._builder = None
            self._path = None
            self._track_uuids.clear()
            self._counter_tracks.clear()

    def instant(
        self, track: str, name: str, args: Optional[Dict[str, Any]] = None
    ) -> None:
        with self._lock:
            if not self._enabled or not self._builder:
                return
            event = self._builder.add_instant_event(
                self._ensure_track(track), name, self._now_ns()
            )
            if args:
                event.add_annotations(args)

    def counter(self, name: str, value: float, unit: str = "count") -> None:
        with self._lock:
            if not self._enabled or not self._builder:
                return
            self._builder.update_counter(
                self._ensure_counter_track(name, unit), value, self._now_ns()
            )


class PerfettoObserver:
    """Notification sink recording emulator activity into a Perfetto trace."""

    def __init__(self, tracer: Optional[PerfettoTracer] = None) -> None:
        self.tracer = tracer or PerfettoTracer()

    def handle_event(self, event: object) -> None:
        tracer = self.tracer
        if not tracer.enabled:
            return
        if isinstance(event, ProgramCounterChanged):
            tracer.counter("pc", event.value)
        elif isinstance(event, RegisterChanged):
            tracer.counter(f"V{event.index:X}", event.value)
        elif isinstance(event, IndexRegisterChanged):
            tracer.counter("I", event.value)
        elif isinstance(event, DelayTimerChanged):
            tracer.counter("delay_timer", event.value, "ticks")
        elif isinstance(event, SoundTimerChanged):
            tracer.counter("sound_timer", event.value, "ticks")
        elif isinstance(event, ScreenRefresh):
            tracer.instant(
                "Display",
                "refresh",
                {
                    "width": event.snapshot.width,
                    "height": event.snapshot.height,
                    "lit": event.snapshot.lit_count(),
                },
            )
        elif isinstance(event, PlaySound):
            tracer.instant("Timers", "play_sound")
        elif isinstance(event, RunStateChanged):
            tracer.instant("Control", "paused" if event.paused else "resumed")
        elif isinstance(event, ExecutionStopped):
            args = {"error": str(event.error)} if event.error else None
            tracer.instant("Control", "stopped", args)


__all__ = ["PerfettoTracer", "PerfettoObserver", "DEFAULT_TRACE_PATH"]
