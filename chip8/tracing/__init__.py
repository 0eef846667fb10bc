"""Tracing utilities for the CHIP-8 emulator."""

from .perfetto_tracing import DEFAULT_TRACE_PATH, PerfettoObserver, PerfettoTracer

__all__ = ["PerfettoTracer", "PerfettoObserver", "DEFAULT_TRACE_PATH"]
