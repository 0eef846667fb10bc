"""Shared pytest fixtures for CHIP-8 core tests."""

from __future__ import annotations

from typing import Iterable, Optional

import pytest

from chip8.config import MachineConfig
from chip8.emulator import Chip8Emulator
from chip8.events import RecordingSink


def assemble(words: Iterable[int], data: bytes = b"") -> bytes:
    return b"".join(word.to_bytes(2, "big") for word in words) + data


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_emulator(sink):
    def factory(
        *words: int, data: bytes = b"", config: Optional[MachineConfig] = None
    ) -> Chip8Emulator:
        return Chip8Emulator(assemble(words, data), config=config, sink=sink)

    return factory


@pytest.fixture
def program():
    """Build a program image from opcode words."""
    return lambda *words, data=b"": assemble(words, data)
