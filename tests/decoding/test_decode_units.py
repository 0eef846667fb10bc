import pytest

from chip8.decoding import decode_map
from chip8.decoding.bind import Addr12, Imm8, Instruction, Nibble, RawWord, RegSel
from chip8.decoding.reader import WordReader


def test_decode_load_imm() -> None:
    di = decode_map.decode_word(0x6A5C)
    assert di.instruction is Instruction.LOAD_IMM
    assert di.family == "imm8"
    assert di.binds["x"] == RegSel(0xA)
    assert di.binds["kk"] == Imm8(0x5C)


def test_decode_jump_and_call_addresses() -> None:
    jump = decode_map.decode_word(0x1ABC)
    call = decode_map.decode_word(0x2ABC)
    assert jump.instruction is Instruction.JUMP
    assert call.instruction is Instruction.CALL
    assert isinstance(jump.binds["addr"], Addr12)
    assert call.binds["addr"].value == 0xABC


def test_decode_draw_operands() -> None:
    di = decode_map.decode_word(0xD125)
    assert di.instruction is Instruction.DRAW
    assert di.binds["x"].index == 1
    assert di.binds["y"].index == 2
    assert di.binds["n"] == Nibble(5)
    assert di.operands() == (RegSel(1), RegSel(2), Nibble(5))


@pytest.mark.parametrize(
    ("word", "instruction"),
    [
        (0x00E0, Instruction.CLEAR_SCREEN),
        (0x00EE, Instruction.RETURN),
        (0x00C4, Instruction.SCROLL_DOWN),
        (0x00FB, Instruction.SCROLL_RIGHT),
        (0x00FC, Instruction.SCROLL_LEFT),
        (0x00FD, Instruction.EXIT),
        (0x00FE, Instruction.LOW_RES),
        (0x00FF, Instruction.HIGH_RES),
        (0x0123, Instruction.SYS),
    ],
)
def test_decode_system_family(word: int, instruction: Instruction) -> None:
    assert decode_map.decode_word(word).instruction is instruction


@pytest.mark.parametrize(
    ("low", "instruction"),
    [
        (0x0, Instruction.LOAD_REG),
        (0x1, Instruction.OR),
        (0x2, Instruction.AND),
        (0x3, Instruction.XOR),
        (0x4, Instruction.ADD_REG),
        (0x5, Instruction.SUB),
        (0x6, Instruction.SHR),
        (0x7, Instruction.SUBN),
        (0xE, Instruction.SHL),
    ],
)
def test_decode_alu_selects_on_low_nibble(low: int, instruction: Instruction) -> None:
    di = decode_map.decode_word(0x8120 | low)
    assert di.instruction is instruction
    assert di.family == "alu"


@pytest.mark.parametrize(
    "word", [0x5121, 0x912F, 0x8128, 0x812F, 0xE19F, 0xF1FF, 0xF101]
)
def test_unknown_encodings_decode_as_unsupported(word: int) -> None:
    di = decode_map.decode_word(word)
    assert di.instruction is Instruction.UNSUPPORTED
    assert not di.supported
    assert di.binds["raw"] == RawWord(word)


def test_decode_misc_table() -> None:
    assert decode_map.decode_word(0xF30A).instruction is Instruction.WAIT_KEY
    assert decode_map.decode_word(0xF333).instruction is Instruction.STORE_BCD
    assert decode_map.decode_word(0xF730).instruction is Instruction.LOAD_LARGE_FONT
    assert decode_map.decode_word(0xF785).instruction is Instruction.LOAD_FLAGS
    assert decode_map.decode_word(0xE5A1).binds["x"].index == 5


def test_decode_rejects_out_of_range_word() -> None:
    with pytest.raises(ValueError):
        decode_map.decode_word(0x10000)


def test_operand_types_validate_ranges() -> None:
    with pytest.raises(ValueError):
        RegSel(16)
    with pytest.raises(ValueError):
        Imm8(0x100)
    with pytest.raises(ValueError):
        Addr12(0x1000)


def test_word_reader_tracks_addresses() -> None:
    reader = WordReader(bytes([0x00, 0xE0, 0x12]), base_address=0x300)
    assert reader.address() == 0x300
    assert reader.read_word() == 0x00E0
    assert reader.address() == 0x302
    assert reader.read_word() == 0x1200
    assert reader.at_end()
    assert reader.bytes_consumed() == 3
    with pytest.raises(ValueError):
        reader.read_u8()
