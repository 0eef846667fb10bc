from __future__ import annotations

from typing import Callable, Dict

from .bind import Addr12, DecodedInstr, Imm8, Instruction, Nibble, RawWord, RegSel

DecoderFunc = Callable[[int], DecodedInstr]


def _x(word: int) -> RegSel:
    return RegSel((word >> 8) & 0xF)


def _y(word: int) -> RegSel:
    return RegSel((word >> 4) & 0xF)


def _kk(word: int) -> Imm8:
    return Imm8(word & 0xFF)


def _nnn(word: int) -> Addr12:
    return Addr12(word & 0xFFF)


def _n(word: int) -> Nibble:
    return Nibble(word & 0xF)


def _unsupported(word: int) -> DecodedInstr:
    return DecodedInstr(
        opcode=word,
        instruction=Instruction.UNSUPPORTED,
        binds={"raw": RawWord(word)},
        family="unsupported",
    )


def _simple(instruction: Instruction, family: str) -> DecoderFunc:
    def decode(word: int) -> DecodedInstr:
        return DecodedInstr(opcode=word, instruction=instruction, family=family)

    return decode


def _with_addr(instruction: Instruction, family: str) -> DecoderFunc:
    def decode(word: int) -> DecodedInstr:
        return DecodedInstr(
            opcode=word,
            instruction=instruction,
            binds={"addr": _nnn(word)},
            family=family,
        )

    return decode


def _with_x(instruction: Instruction, family: str) -> DecoderFunc:
    def decode(word: int) -> DecodedInstr:
        return DecodedInstr(
            opcode=word,
            instruction=instruction,
            binds={"x": _x(word)},
            family=family,
        )

    return decode


def _with_x_kk(instruction: Instruction, family: str) -> DecoderFunc:
    def decode(word: int) -> DecodedInstr:
        return DecodedInstr(
            opcode=word,
            instruction=instruction,
            binds={"x": _x(word), "kk": _kk(word)},
            family=family,
        )

    return decode


def _with_x_y(instruction: Instruction, family: str) -> DecoderFunc:
    def decode(word: int) -> DecodedInstr:
        return DecodedInstr(
            opcode=word,
            instruction=instruction,
            binds={"x": _x(word), "y": _y(word)},
            family=family,
        )

    return decode


# ---------------------------------------------------------------------------
# 0x0nnn family: screen control, return and legacy machine-code calls
# ---------------------------------------------------------------------------

_SYSTEM_TABLE: Dict[int, DecoderFunc] = {
    0x00E0: _simple(Instruction.CLEAR_SCREEN, "display"),
    0x00EE: _simple(Instruction.RETURN, "flow"),
    0x00FB: _simple(Instruction.SCROLL_RIGHT, "display"),
    0x00FC: _simple(Instruction.SCROLL_LEFT, "display"),
    0x00FD: _simple(Instruction.EXIT, "flow"),
    0x00FE: _simple(Instruction.LOW_RES, "display"),
    0x00FF: _simple(Instruction.HIGH_RES, "display"),
}


def _dec_system(word: int) -> DecodedInstr:
    decoder = _SYSTEM_TABLE.get(word)
    if decoder is not None:
        return decoder(word)
    if word & 0xFFF0 == 0x00C0:
        return DecodedInstr(
            opcode=word,
            instruction=Instruction.SCROLL_DOWN,
            binds={"n": _n(word)},
            family="display",
        )
    return _with_addr(Instruction.SYS, "flow")(word)


def _dec_skip_eq_reg(word: int) -> DecodedInstr:
    if word & 0xF != 0:
        return _unsupported(word)
    return _with_x_y(Instruction.SKIP_EQ_REG, "skip")(word)


def _dec_skip_ne_reg(word: int) -> DecodedInstr:
    if word & 0xF != 0:
        return _unsupported(word)
    return _with_x_y(Instruction.SKIP_NE_REG, "skip")(word)


# ---------------------------------------------------------------------------
# 0x8xyN family: register ALU, selected by the low nibble
# ---------------------------------------------------------------------------

_ALU_TABLE: Dict[int, DecoderFunc] = {
    0x0: _with_x_y(Instruction.LOAD_REG, "alu"),
    0x1: _with_x_y(Instruction.OR, "alu"),
    0x2: _with_x_y(Instruction.AND, "alu"),
    0x3: _with_x_y(Instruction.XOR, "alu"),
    0x4: _with_x_y(Instruction.ADD_REG, "alu"),
    0x5: _with_x_y(Instruction.SUB, "alu"),
    0x6: _with_x_y(Instruction.SHR, "alu"),
    0x7: _with_x_y(Instruction.SUBN, "alu"),
    0xE: _with_x_y(Instruction.SHL, "alu"),
}


def _dec_alu(word: int) -> DecodedInstr:
    decoder = _ALU_TABLE.get(word & 0xF)
    if decoder is None:
        return _unsupported(word)
    return decoder(word)


def _dec_draw(word: int) -> DecodedInstr:
    return DecodedInstr(
        opcode=word,
        instruction=Instruction.DRAW,
        binds={"x": _x(word), "y": _y(word), "n": _n(word)},
        family="display",
    )


# ---------------------------------------------------------------------------
# 0xExkk / 0xFxkk families, selected by the low byte
# ---------------------------------------------------------------------------

_KEY_TABLE: Dict[int, DecoderFunc] = {
    0x9E: _with_x(Instruction.SKIP_KEY, "input"),
    0xA1: _with_x(Instruction.SKIP_NOT_KEY, "input"),
}

_MISC_TABLE: Dict[int, DecoderFunc] = {
    0x07: _with_x(Instruction.LOAD_DELAY, "timer"),
    0x0A: _with_x(Instruction.WAIT_KEY, "input"),
    0x15: _with_x(Instruction.SET_DELAY, "timer"),
    0x18: _with_x(Instruction.SET_SOUND, "timer"),
    0x1E: _with_x(Instruction.ADD_INDEX, "memory"),
    0x29: _with_x(Instruction.LOAD_FONT, "memory"),
    0x30: _with_x(Instruction.LOAD_LARGE_FONT, "memory"),
    0x33: _with_x(Instruction.STORE_BCD, "memory"),
    0x55: _with_x(Instruction.STORE_REGISTERS, "memory"),
    0x65: _with_x(Instruction.LOAD_REGISTERS, "memory"),
    0x75: _with_x(Instruction.STORE_FLAGS, "memory"),
    0x85: _with_x(Instruction.LOAD_FLAGS, "memory"),
}


def _dec_key(word: int) -> DecodedInstr:
    decoder = _KEY_TABLE.get(word & 0xFF)
    if decoder is None:
        return _unsupported(word)
    return decoder(word)


def _dec_misc(word: int) -> DecodedInstr:
    decoder = _MISC_TABLE.get(word & 0xFF)
    if decoder is None:
        return _unsupported(word)
    return decoder(word)


# Top nibble -> decoder
DECODERS: Dict[int, DecoderFunc] = {
    0x0: _dec_system,
    0x1: _with_addr(Instruction.JUMP, "flow"),
    0x2: _with_addr(Instruction.CALL, "flow"),
    0x3: _with_x_kk(Instruction.SKIP_EQ_IMM, "skip"),
    0x4: _with_x_kk(Instruction.SKIP_NE_IMM, "skip"),
    0x5: _dec_skip_eq_reg,
    0x6: _with_x_kk(Instruction.LOAD_IMM, "imm8"),
    0x7: _with_x_kk(Instruction.ADD_IMM, "imm8"),
    0x8: _dec_alu,
    0x9: _dec_skip_ne_reg,
    0xA: _with_addr(Instruction.LOAD_INDEX, "memory"),
    0xB: _with_addr(Instruction.JUMP_V0, "flow"),
    0xC: _with_x_kk(Instruction.RANDOM, "imm8"),
    0xD: _dec_draw,
    0xE: _dec_key,
    0xF: _dec_misc,
}


def decode_word(word: int) -> DecodedInstr:
    """Decode one 16-bit opcode. Pure: no state is read or written."""
    if not 0 <= word <= 0xFFFF:
        raise ValueError(f"Opcode word out of range: {word:#x}")
    return DECODERS[word >> 12](word)


__all__ = ["DECODERS", "DecoderFunc", "decode_word"]
