"""Semantics of every CHIP-8 and SUPER-CHIP instruction.

Handlers run after the program counter has already been advanced past the
opcode, so ``state.pc`` is the address of the following instruction. Skips
add another 2, jumps overwrite it.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .config import MachineConfig
from .decoding import DecodedInstr, Instruction
from .errors import AddressOutOfRangeError, UnsupportedOpcodeError
from .memory import (
    FONT_ADDRESS,
    FONT_GLYPH_SIZE,
    LARGE_FONT_ADDRESS,
    LARGE_FONT_GLYPH_SIZE,
)
from .state_model import FLAG_REGISTER, MachineState, RPL_FLAG_COUNT


@dataclass(frozen=True)
class ExecutionOutcome:
    """Side effects of one instruction the caller must publish."""

    redraw: bool = False
    halted: bool = False


CONTINUE = ExecutionOutcome()
REDRAW = ExecutionOutcome(redraw=True)
HALT = ExecutionOutcome(halted=True)

Handler = Callable[["InstructionExecutor", DecodedInstr], ExecutionOutcome]


def _reg(decoded: DecodedInstr, name: str) -> int:
    return decoded.binds[name].index  # type: ignore[attr-defined]


def _val(decoded: DecodedInstr, name: str) -> int:
    return decoded.binds[name].value  # type: ignore[attr-defined]


class InstructionExecutor:
    """Applies decoded instructions to a :class:`MachineState`."""

    def __init__(
        self,
        state: MachineState,
        config: Optional[MachineConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.state = state
        self.config = config or MachineConfig()
        self.rng = rng or random.Random(self.config.random_seed)

    def execute(self, decoded: DecodedInstr, address: Optional[int] = None) -> ExecutionOutcome:
        handler = _HANDLERS.get(decoded.instruction)
        # SYS and UNSUPPORTED have no handler.
        if handler is None:
            raise UnsupportedOpcodeError(decoded.opcode, address)
        return handler(self, decoded)

    # ------------------------------------------------------------------ #
    # 0x0 family
    # ------------------------------------------------------------------ #
    def _scroll_down(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.display.scroll_down(_val(decoded, "n"))
        return REDRAW

    def _clear_screen(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.display.clear()
        return REDRAW

    def _return(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.pc = self.state.stack.pop()
        return CONTINUE

    def _scroll_right(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.display.scroll_right(4)
        return REDRAW

    def _scroll_left(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.display.scroll_left(4)
        return REDRAW

    def _exit(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.halted = True
        return HALT

    def _low_res(self, decoded: DecodedInstr) -> ExecutionOutcome:
        # Extended mode is one-way until reset.
        return CONTINUE

    def _high_res(self, decoded: DecodedInstr) -> ExecutionOutcome:
        if self.state.display.enable_extended_mode():
            return REDRAW
        return CONTINUE

    # ------------------------------------------------------------------ #
    # Flow control and skips
    # ------------------------------------------------------------------ #
    def _branch_target(self, target: int) -> int:
        """Validate a jump or call target; PC stays even and inside memory."""
        size = len(self.state.memory)
        if target >= size:
            raise AddressOutOfRangeError(target, size)
        if target & 1:
            raise AddressOutOfRangeError(
                target, size, f"Branch target 0x{target:03X} is not 2-byte aligned"
            )
        return target

    def _jump(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.pc = self._branch_target(_val(decoded, "addr"))
        return CONTINUE

    def _call(self, decoded: DecodedInstr) -> ExecutionOutcome:
        target = self._branch_target(_val(decoded, "addr"))
        self.state.stack.push(self.state.pc)
        self.state.pc = target
        return CONTINUE

    def _jump_v0(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.pc = self._branch_target(_val(decoded, "addr") + self.state.v[0])
        return CONTINUE

    def _skip_if(self, condition: bool) -> ExecutionOutcome:
        if condition:
            self.state.pc += 2
        return CONTINUE

    def _skip_eq_imm(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        return self._skip_if(v[_reg(decoded, "x")] == _val(decoded, "kk"))

    def _skip_ne_imm(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        return self._skip_if(v[_reg(decoded, "x")] != _val(decoded, "kk"))

    def _skip_eq_reg(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        return self._skip_if(v[_reg(decoded, "x")] == v[_reg(decoded, "y")])

    def _skip_ne_reg(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        return self._skip_if(v[_reg(decoded, "x")] != v[_reg(decoded, "y")])

    def _skip_key(self, decoded: DecodedInstr) -> ExecutionOutcome:
        key = self.state.v[_reg(decoded, "x")]
        return self._skip_if(self.state.keypad.is_pressed(key))

    def _skip_not_key(self, decoded: DecodedInstr) -> ExecutionOutcome:
        key = self.state.v[_reg(decoded, "x")]
        return self._skip_if(not self.state.keypad.is_pressed(key))

    # ------------------------------------------------------------------ #
    # Immediates and register ALU
    # ------------------------------------------------------------------ #
    def _load_imm(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.set_register(_reg(decoded, "x"), _val(decoded, "kk"))
        return CONTINUE

    def _add_imm(self, decoded: DecodedInstr) -> ExecutionOutcome:
        x = _reg(decoded, "x")
        self.state.set_register(x, self.state.v[x] + _val(decoded, "kk"))
        return CONTINUE

    def _random(self, decoded: DecodedInstr) -> ExecutionOutcome:
        value = self.rng.randrange(256) & _val(decoded, "kk")
        self.state.set_register(_reg(decoded, "x"), value)
        return CONTINUE

    def _load_reg(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        v[_reg(decoded, "x")] = v[_reg(decoded, "y")]
        return CONTINUE

    def _or(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        v[_reg(decoded, "x")] |= v[_reg(decoded, "y")]
        return CONTINUE

    def _and(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        v[_reg(decoded, "x")] &= v[_reg(decoded, "y")]
        return CONTINUE

    def _xor(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        v[_reg(decoded, "x")] ^= v[_reg(decoded, "y")]
        return CONTINUE

    def _add_reg(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        x = _reg(decoded, "x")
        total = v[x] + v[_reg(decoded, "y")]
        self.state.set_register(x, total)
        self.state.set_flag(total > 0xFF)
        return CONTINUE

    def _sub(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        x = _reg(decoded, "x")
        vx, vy = v[x], v[_reg(decoded, "y")]
        self.state.set_register(x, vx - vy)
        self.state.set_flag(vx >= vy)
        return CONTINUE

    def _subn(self, decoded: DecodedInstr) -> ExecutionOutcome:
        v = self.state.v
        x = _reg(decoded, "x")
        vx, vy = v[x], v[_reg(decoded, "y")]
        self.state.set_register(x, vy - vx)
        self.state.set_flag(vy >= vx)
        return CONTINUE

    def _shift_source(self, decoded: DecodedInstr) -> int:
        if self.config.shift_uses_vy:
            return self.state.v[_reg(decoded, "y")]
        return self.state.v[_reg(decoded, "x")]

    def _shr(self, decoded: DecodedInstr) -> ExecutionOutcome:
        source = self._shift_source(decoded)
        self.state.set_register(_reg(decoded, "x"), source >> 1)
        self.state.set_flag(source & 0x01)
        return CONTINUE

    def _shl(self, decoded: DecodedInstr) -> ExecutionOutcome:
        source = self._shift_source(decoded)
        self.state.set_register(_reg(decoded, "x"), source << 1)
        self.state.set_flag(source & 0x80)
        return CONTINUE

    # ------------------------------------------------------------------ #
    # Index register, memory and display
    # ------------------------------------------------------------------ #
    def _load_index(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.index = _val(decoded, "addr")
        return CONTINUE

    def _add_index(self, decoded: DecodedInstr) -> ExecutionOutcome:
        state = self.state
        state.index = (state.index + state.v[_reg(decoded, "x")]) & 0xFFFF
        return CONTINUE

    def _draw(self, decoded: DecodedInstr) -> ExecutionOutcome:
        state = self.state
        x = state.v[_reg(decoded, "x")]
        y = state.v[_reg(decoded, "y")]
        n = _val(decoded, "n")
        if n == 0:
            if not state.display.extended:
                state.set_flag(False)
                return CONTINUE
            data = state.memory.read_block(state.index, 32)
            rows: List[int] = [
                (data[i] << 8) | data[i + 1] for i in range(0, len(data), 2)
            ]
            collision = state.display.draw_sprite(x, y, rows, width=16)
        else:
            rows = list(state.memory.read_block(state.index, n))
            collision = state.display.draw_sprite(x, y, rows)
        state.set_flag(collision)
        return REDRAW

    def _load_font(self, decoded: DecodedInstr) -> ExecutionOutcome:
        digit = self.state.v[_reg(decoded, "x")] & 0xF
        self.state.index = FONT_ADDRESS + digit * FONT_GLYPH_SIZE
        return CONTINUE

    def _load_large_font(self, decoded: DecodedInstr) -> ExecutionOutcome:
        digit = (self.state.v[_reg(decoded, "x")] & 0xF) % 10
        self.state.index = LARGE_FONT_ADDRESS + digit * LARGE_FONT_GLYPH_SIZE
        return CONTINUE

    def _store_bcd(self, decoded: DecodedInstr) -> ExecutionOutcome:
        value = self.state.v[_reg(decoded, "x")]
        self.state.memory.write_block(
            self.state.index, (value // 100, (value // 10) % 10, value % 10)
        )
        return CONTINUE

    def _store_registers(self, decoded: DecodedInstr) -> ExecutionOutcome:
        x = _reg(decoded, "x")
        self.state.memory.write_block(self.state.index, self.state.v[: x + 1])
        return CONTINUE

    def _load_registers(self, decoded: DecodedInstr) -> ExecutionOutcome:
        x = _reg(decoded, "x")
        self.state.v[: x + 1] = self.state.memory.read_block(self.state.index, x + 1)
        return CONTINUE

    def _store_flags(self, decoded: DecodedInstr) -> ExecutionOutcome:
        count = min(_reg(decoded, "x"), RPL_FLAG_COUNT - 1) + 1
        self.state.rpl_flags[:count] = self.state.v[:count]
        return CONTINUE

    def _load_flags(self, decoded: DecodedInstr) -> ExecutionOutcome:
        count = min(_reg(decoded, "x"), RPL_FLAG_COUNT - 1) + 1
        self.state.v[:count] = self.state.rpl_flags[:count]
        return CONTINUE

    # ------------------------------------------------------------------ #
    # Timers and input
    # ------------------------------------------------------------------ #
    def _load_delay(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.set_register(_reg(decoded, "x"), self.state.delay_timer)
        return CONTINUE

    def _set_delay(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.delay_timer = self.state.v[_reg(decoded, "x")]
        return CONTINUE

    def _set_sound(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.sound_timer = self.state.v[_reg(decoded, "x")]
        return CONTINUE

    def _wait_key(self, decoded: DecodedInstr) -> ExecutionOutcome:
        self.state.key_wait_register = _reg(decoded, "x")
        return CONTINUE


_HANDLERS: Dict[Instruction, Handler] = {
    Instruction.SCROLL_DOWN: InstructionExecutor._scroll_down,
    Instruction.CLEAR_SCREEN: InstructionExecutor._clear_screen,
    Instruction.RETURN: InstructionExecutor._return,
    Instruction.SCROLL_RIGHT: InstructionExecutor._scroll_right,
    Instruction.SCROLL_LEFT: InstructionExecutor._scroll_left,
    Instruction.EXIT: InstructionExecutor._exit,
    Instruction.LOW_RES: InstructionExecutor._low_res,
    Instruction.HIGH_RES: InstructionExecutor._high_res,
    Instruction.JUMP: InstructionExecutor._jump,
    Instruction.CALL: InstructionExecutor._call,
    Instruction.SKIP_EQ_IMM: InstructionExecutor._skip_eq_imm,
    Instruction.SKIP_NE_IMM: InstructionExecutor._skip_ne_imm,
    Instruction.SKIP_EQ_REG: InstructionExecutor._skip_eq_reg,
    Instruction.LOAD_IMM: InstructionExecutor._load_imm,
    Instruction.ADD_IMM: InstructionExecutor._add_imm,
    Instruction.LOAD_REG: InstructionExecutor._load_reg,
    Instruction.OR: InstructionExecutor._or,
    Instruction.AND: InstructionExecutor._and,
    Instruction.XOR: InstructionExecutor._xor,
    Instruction.ADD_REG: InstructionExecutor._add_reg,
    Instruction.SUB: InstructionExecutor._sub,
    Instruction.SHR: InstructionExecutor._shr,
    Instruction.SUBN: InstructionExecutor._subn,
    Instruction.SHL: InstructionExecutor._shl,
    Instruction.SKIP_NE_REG: InstructionExecutor._skip_ne_reg,
    Instruction.LOAD_INDEX: InstructionExecutor._load_index,
    Instruction.JUMP_V0: InstructionExecutor._jump_v0,
    Instruction.RANDOM: InstructionExecutor._random,
    Instruction.DRAW: InstructionExecutor._draw,
    Instruction.SKIP_KEY: InstructionExecutor._skip_key,
    Instruction.SKIP_NOT_KEY: InstructionExecutor._skip_not_key,
    Instruction.LOAD_DELAY: InstructionExecutor._load_delay,
    Instruction.WAIT_KEY: InstructionExecutor._wait_key,
    Instruction.SET_DELAY: InstructionExecutor._set_delay,
    Instruction.SET_SOUND: InstructionExecutor._set_sound,
    Instruction.ADD_INDEX: InstructionExecutor._add_index,
    Instruction.LOAD_FONT: InstructionExecutor._load_font,
    Instruction.LOAD_LARGE_FONT: InstructionExecutor._load_large_font,
    Instruction.STORE_BCD: InstructionExecutor._store_bcd,
    Instruction.STORE_REGISTERS: InstructionExecutor._store_registers,
    Instruction.LOAD_REGISTERS: InstructionExecutor._load_registers,
    Instruction.STORE_FLAGS: InstructionExecutor._store_flags,
    Instruction.LOAD_FLAGS: InstructionExecutor._load_flags,
}


__all__ = ["InstructionExecutor", "ExecutionOutcome"]
