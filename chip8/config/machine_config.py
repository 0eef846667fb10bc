"""Machine configuration for the CHIP-8 emulator."""

from dataclasses import asdict, dataclass
from typing import Optional
import json

from ..memory import MEMORY_SIZE, PROGRAM_START

DEFAULT_INSTRUCTION_DELAY_MS = 1
DEFAULT_TIMER_FREQUENCY = 60
DEFAULT_STACK_DEPTH = 16
MIN_STACK_DEPTH = 12
MAX_STACK_DEPTH = 16


@dataclass
class MachineConfig:
    """CHIP-8 interpreter configuration.

    ``shift_uses_vy`` selects the shift convention: False shifts Vx in place
    (CHIP-48/SUPER-CHIP), True loads Vx from Vy shifted (COSMAC VIP).
    """
    name: str = "CHIP-8"
    instruction_delay_ms: float = DEFAULT_INSTRUCTION_DELAY_MS
    timer_frequency: int = DEFAULT_TIMER_FREQUENCY
    stack_depth: int = DEFAULT_STACK_DEPTH
    program_start: int = PROGRAM_START
    shift_uses_vy: bool = False
    random_seed: Optional[int] = None

    def __post_init__(self):
        if not MIN_STACK_DEPTH <= self.stack_depth <= MAX_STACK_DEPTH:
            raise ValueError(
                f"Stack depth {self.stack_depth} outside "
                f"{MIN_STACK_DEPTH}-{MAX_STACK_DEPTH}"
            )
        if self.instruction_delay_ms < 0:
            raise ValueError("Instruction delay must be non-negative")
        if self.timer_frequency <= 0:
            raise ValueError("Timer frequency must be positive")
        if self.program_start & 1 or not 0 <= self.program_start < MEMORY_SIZE:
            raise ValueError(
                f"Program start 0x{self.program_start:03X} must be an even address"
            )

    @property
    def timer_period(self) -> float:
        return 1.0 / self.timer_frequency

    def to_dict(self) -> dict:
        data = asdict(self)
        data["program_start"] = f"0x{self.program_start:03X}"
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'MachineConfig':
        start = data.get("program_start", PROGRAM_START)
        return cls(
            name=data.get("name", "CHIP-8"),
            instruction_delay_ms=data.get(
                "instruction_delay_ms", DEFAULT_INSTRUCTION_DELAY_MS
            ),
            timer_frequency=data.get("timer_frequency", DEFAULT_TIMER_FREQUENCY),
            stack_depth=data.get("stack_depth", DEFAULT_STACK_DEPTH),
            program_start=int(start, 16) if isinstance(start, str) else start,
            shift_uses_vy=bool(data.get("shift_uses_vy", False)),
            random_seed=data.get("random_seed"),
        )

    def save(self, path: str) -> None:
        """Save configuration to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> 'MachineConfig':
        """Load configuration from JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def for_model(cls, model: str) -> 'MachineConfig':
        """Get configuration for a specific interpreter variant."""
        configs = {
            "CHIP-8": cls(name="CHIP-8"),
            "COSMAC-VIP": cls(
                name="COSMAC-VIP",
                stack_depth=12,
                shift_uses_vy=True,
            ),
            "SUPER-CHIP": cls(name="SUPER-CHIP"),
        }

        return configs.get(model, configs["CHIP-8"])
