"""Reading raw program images from disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .errors import ProgramTooLargeError
from .memory import MEMORY_SIZE, PROGRAM_START

logger = logging.getLogger(__name__)


class ProgramLoader:
    """Loads a program file as raw bytes; no header, no validation of content."""

    def __init__(self, start_address: int = PROGRAM_START) -> None:
        self.start_address = start_address

    @property
    def capacity(self) -> int:
        return MEMORY_SIZE - self.start_address

    def load(self, path: Union[str, Path]) -> bytes:
        """Return the file contents.

        Raises ``OSError`` when the file cannot be read and
        :class:`ProgramTooLargeError` when it does not fit in memory.
        """
        path = Path(path)
        data = path.read_bytes()
        if len(data) > self.capacity:
            raise ProgramTooLargeError(len(data), self.capacity)
        if not data:
            logger.warning("Program file %s is empty", path)
        logger.info("Loaded program %s (%d bytes)", path, len(data))
        return data


__all__ = ["ProgramLoader"]
