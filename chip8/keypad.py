"""Sixteen-key hexadecimal keypad state."""

from __future__ import annotations

from typing import Tuple

KEY_COUNT = 16


def _validate(key: int) -> int:
    if not 0 <= key < KEY_COUNT:
        raise ValueError(f"Keypad key out of range: {key!r} (expected 0x0-0xF)")
    return key


class Keypad:
    """Key-down flags for keys 0x0-0xF."""

    def __init__(self) -> None:
        self._down = [False] * KEY_COUNT

    def press_key(self, key: int) -> bool:
        """Mark ``key`` as down. Returns True on an up-to-down transition."""
        key = _validate(key)
        was_down = self._down[key]
        self._down[key] = True
        return not was_down

    def release_key(self, key: int) -> bool:
        """Mark ``key`` as up. Returns True when it was down."""
        key = _validate(key)
        was_down = self._down[key]
        self._down[key] = False
        return was_down

    def release_all_keys(self) -> None:
        self._down = [False] * KEY_COUNT

    def is_pressed(self, key: int) -> bool:
        # Instructions pass register values; only the low nibble names a key.
        return self._down[key & 0xF]

    def get_pressed_keys(self) -> Tuple[int, ...]:
        return tuple(key for key, down in enumerate(self._down) if down)


__all__ = ["Keypad", "KEY_COUNT"]
