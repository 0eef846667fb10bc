"""Instruction semantics, executed through the synchronous core."""

import pytest

from chip8.config import MachineConfig
from chip8.errors import (
    AddressOutOfRangeError,
    StackOverflowError,
    StackUnderflowError,
    UnsupportedOpcodeError,
)
from chip8.events import ScreenRefresh


# ---------------------------------------------------------------------------
# Arithmetic and flags
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "vx, vy, result, flag",
    [(0xFF, 0x02, 0x01, 1), (0x10, 0x20, 0x30, 0), (0x80, 0x80, 0x00, 1)],
)
def test_add_registers_sets_carry(make_emulator, vx, vy, result, flag) -> None:
    emu = make_emulator(0x6000 | vx, 0x6100 | vy, 0x8014)
    assert emu.run(3) == 3
    assert emu.state.v[0] == result
    assert emu.state.v[0xF] == flag


@pytest.mark.parametrize(
    "vx, vy, result, flag",
    [(5, 3, 2, 1), (3, 5, 0xFE, 0), (7, 7, 0, 1)],
)
def test_subtract_sets_no_borrow_flag(make_emulator, vx, vy, result, flag) -> None:
    emu = make_emulator(0x6000 | vx, 0x6100 | vy, 0x8015)
    emu.run(3)
    assert emu.state.v[0] == result
    assert emu.state.v[0xF] == flag


@pytest.mark.parametrize(
    "vx, vy, result, flag",
    [(3, 5, 2, 1), (5, 3, 0xFE, 0), (9, 9, 0, 1)],
)
def test_subtract_reversed(make_emulator, vx, vy, result, flag) -> None:
    emu = make_emulator(0x6000 | vx, 0x6100 | vy, 0x8017)
    emu.run(3)
    assert emu.state.v[0] == result
    assert emu.state.v[0xF] == flag


def test_flag_wins_when_vf_is_destination(make_emulator) -> None:
    emu = make_emulator(0x6FFF, 0x6101, 0x8F14)
    emu.run(3)
    assert emu.state.v[0xF] == 1


@pytest.mark.parametrize(
    "low, expected",
    [(0x1, 0x07), (0x2, 0x01), (0x3, 0x06), (0x0, 0x05)],
)
def test_bitwise_ops_leave_vf(make_emulator, low, expected) -> None:
    emu = make_emulator(0x6F42, 0x6003, 0x6105, 0x8010 | low)
    emu.run(4)
    # 8xy0 copies Vy into Vx.
    assert emu.state.v[0] == expected
    assert emu.state.v[0xF] == 0x42


def test_add_immediate_wraps_without_flag(make_emulator) -> None:
    emu = make_emulator(0x60FF, 0x7002)
    emu.run(2)
    assert emu.state.v[0] == 0x01
    assert emu.state.v[0xF] == 0


def test_shift_right_in_place_by_default(make_emulator) -> None:
    emu = make_emulator(0x6005, 0x6108, 0x8016)
    emu.run(3)
    assert emu.state.v[0] == 0x02
    assert emu.state.v[0xF] == 1


def test_shift_left_in_place_by_default(make_emulator) -> None:
    emu = make_emulator(0x6081, 0x610F, 0x801E)
    emu.run(3)
    assert emu.state.v[0] == 0x02
    assert emu.state.v[0xF] == 1


def test_shift_uses_vy_when_configured(make_emulator) -> None:
    config = MachineConfig.for_model("COSMAC-VIP")
    emu = make_emulator(0x6005, 0x6108, 0x8016, config=config)
    emu.run(3)
    assert emu.state.v[0] == 0x04
    assert emu.state.v[0xF] == 0


def test_random_is_masked_and_seeded(make_emulator) -> None:
    config = MachineConfig(random_seed=1234)
    first = make_emulator(0xC00F, 0xC100, config=config)
    second = make_emulator(0xC00F, 0xC100, config=config)
    first.run(2)
    second.run(2)
    assert first.state.v[0] & 0xF0 == 0
    assert first.state.v[1] == 0
    assert first.state.v[0] == second.state.v[0]


# ---------------------------------------------------------------------------
# Flow control
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "words, expected_pc",
    [
        ((0x6005, 0x3005), 0x206),
        ((0x6005, 0x3006), 0x204),
        ((0x6005, 0x4006), 0x206),
        ((0x6005, 0x4005), 0x204),
        ((0x6005, 0x6105, 0x5010), 0x208),
        ((0x6005, 0x6106, 0x5010), 0x206),
        ((0x6005, 0x6106, 0x9010), 0x208),
        ((0x6005, 0x6105, 0x9010), 0x206),
    ],
)
def test_skip_advances_pc_by_four_when_taken(make_emulator, words, expected_pc) -> None:
    emu = make_emulator(*words)
    emu.run(len(words))
    assert emu.state.pc == expected_pc


def test_key_skips(make_emulator) -> None:
    emu = make_emulator(0x6005, 0xE09E, 0x0000, 0xE0A1)
    emu.press_key(5)
    emu.run(2)
    assert emu.state.pc == 0x206
    emu.step()
    assert emu.state.pc == 0x208

    emu = make_emulator(0x6005, 0xE0A1)
    emu.run(2)
    assert emu.state.pc == 0x206


def test_jump_and_jump_plus_v0(make_emulator) -> None:
    emu = make_emulator(0x1228)
    emu.step()
    assert emu.state.pc == 0x228

    emu = make_emulator(0x6004, 0xB300)
    emu.run(2)
    assert emu.state.pc == 0x304


@pytest.mark.parametrize(
    "words",
    [(0x1203,), (0x2203,), (0x6001, 0xB300), (0x60FF, 0xBF02)],
)
def test_branch_to_odd_or_outside_address_faults(make_emulator, words) -> None:
    emu = make_emulator(*words)
    emu.run(len(words) - 1)
    faulting_pc = emu.state.pc
    with pytest.raises(AddressOutOfRangeError):
        emu.step()
    assert emu.state.pc == faulting_pc
    assert len(emu.state.stack) == 0


def test_call_pushes_return_address_and_return_pops(make_emulator) -> None:
    emu = make_emulator(0x2206, 0x0000, 0x0000, 0x00EE)
    emu.step()
    assert emu.state.pc == 0x206
    assert emu.state.stack.frames() == (0x202,)
    emu.step()
    assert emu.state.pc == 0x202
    assert len(emu.state.stack) == 0


def test_sixteen_nested_calls_then_overflow(make_emulator) -> None:
    # Each word calls the next one.
    words = [0x2000 | (0x202 + 2 * i) for i in range(17)]
    emu = make_emulator(*words)
    assert emu.run(16) == 16
    assert len(emu.state.stack) == 16
    with pytest.raises(StackOverflowError):
        emu.step()


def test_sixteen_nested_calls_unwind(make_emulator) -> None:
    # 0x200..0x21E call the next word; 0x220 returns. The pc is rewound to
    # 0x220 after each pop.
    words = [0x2000 | (0x202 + 2 * i) for i in range(16)] + [0x00EE]
    emu = make_emulator(*words)
    emu.run(16)
    for depth in reversed(range(16)):
        emu.step()
        assert len(emu.state.stack) == depth
        assert emu.state.pc == 0x202 + 2 * depth
        emu.state.pc = 0x220


def test_stack_depth_follows_config(make_emulator) -> None:
    words = [0x2000 | (0x202 + 2 * i) for i in range(13)]
    emu = make_emulator(*words, config=MachineConfig(stack_depth=12))
    emu.run(12)
    with pytest.raises(StackOverflowError):
        emu.step()


def test_return_with_empty_stack_underflows(make_emulator) -> None:
    emu = make_emulator(0x00EE)
    with pytest.raises(StackUnderflowError):
        emu.step()


@pytest.mark.parametrize("word", [0x0123, 0x5001, 0x800F, 0xE000, 0xF0FF])
def test_unsupported_and_machine_calls_raise(make_emulator, word) -> None:
    emu = make_emulator(word)
    with pytest.raises(UnsupportedOpcodeError) as excinfo:
        emu.step()
    assert excinfo.value.opcode == word
    assert excinfo.value.address == 0x200


def test_exit_halts(make_emulator) -> None:
    emu = make_emulator(0x00FD, 0x6001)
    assert emu.step() is False
    assert emu.halted
    assert emu.step() is False
    assert emu.state.v[0] == 0


# ---------------------------------------------------------------------------
# Index register and memory
# ---------------------------------------------------------------------------


def test_add_to_index_leaves_vf(make_emulator) -> None:
    emu = make_emulator(0xA0FF, 0x60FF, 0xF01E)
    emu.run(3)
    assert emu.state.index == 0x1FE
    assert emu.state.v[0xF] == 0


def test_add_to_index_wraps_at_sixteen_bits(make_emulator) -> None:
    emu = make_emulator(0x6002, 0xF01E)
    emu.step()
    emu.state.index = 0xFFFF
    emu.step()
    assert emu.state.index == 0x0001


def test_font_glyph_addresses(make_emulator) -> None:
    emu = make_emulator(0x600A, 0xF029, 0x6107, 0xF130)
    emu.run(2)
    assert emu.state.index == 50
    emu.run(2)
    assert emu.state.index == 0x0A0 + 7 * 10


def test_store_bcd(make_emulator) -> None:
    emu = make_emulator(0x60EA, 0xA300, 0xF033)
    emu.run(3)
    assert emu.state.memory.read_block(0x300, 3) == bytes([2, 3, 4])


def test_store_and_load_registers_keep_index(make_emulator) -> None:
    emu = make_emulator(
        0x6011, 0x6122, 0x6233, 0x6344, 0xA300, 0xF255,
        0x6000, 0x6100, 0x6200, 0xF265,
    )
    emu.run(6)
    assert emu.state.memory.read_block(0x300, 4) == bytes([0x11, 0x22, 0x33, 0])
    assert emu.state.index == 0x300
    emu.run(4)
    assert list(emu.state.v[:4]) == [0x11, 0x22, 0x33, 0x44]
    assert emu.state.index == 0x300


def test_rpl_flags_round_trip(make_emulator) -> None:
    emu = make_emulator(0x6007, 0x6108, 0xF175, 0x6000, 0x6100, 0xF185)
    emu.run(3)
    assert list(emu.state.rpl_flags[:2]) == [7, 8]
    emu.run(3)
    assert list(emu.state.v[:2]) == [7, 8]


def test_timer_instructions(make_emulator) -> None:
    emu = make_emulator(0x6020, 0xF015, 0xF018, 0xF107)
    emu.run(4)
    assert emu.state.delay_timer == 0x20
    assert emu.state.sound_timer == 0x20
    assert emu.state.v[1] == 0x20


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def test_draw_twice_reports_collision_and_erases(make_emulator, sink) -> None:
    emu = make_emulator(0xD015, 0xD015)
    emu.step()
    assert emu.state.v[0xF] == 0
    assert emu.state.display.snapshot().lit_count() == 14
    emu.step()
    assert emu.state.v[0xF] == 1
    assert emu.state.display.snapshot().lit_count() == 0
    assert len(sink.of_type(ScreenRefresh)) == 2


def test_draw_wraps_horizontally(make_emulator) -> None:
    emu = make_emulator(0x603E, 0xD011)
    emu.run(2)
    display = emu.state.display
    assert [display.get_pixel(x, 0) for x in (62, 63, 0, 1, 2)] == [
        True, True, True, True, False,
    ]


def test_draw_wraps_vertically(make_emulator) -> None:
    emu = make_emulator(0x611F, 0xD015)
    emu.run(2)
    display = emu.state.display
    assert display.get_pixel(0, 31)
    assert display.get_pixel(0, 0)
    assert display.get_pixel(0, 3)


def test_zero_height_draw_in_standard_mode_draws_nothing(make_emulator) -> None:
    emu = make_emulator(0x6F01, 0xD010)
    emu.run(2)
    assert emu.state.v[0xF] == 0
    assert emu.state.display.snapshot().lit_count() == 0


def test_zero_height_draw_in_extended_mode_is_16x16(make_emulator) -> None:
    emu = make_emulator(0x00FF, 0xA208, 0xD010, 0x1206, data=b"\xFF" * 32)
    emu.run(3)
    snapshot = emu.state.display.snapshot()
    assert (snapshot.width, snapshot.height) == (128, 64)
    assert snapshot.lit_count() == 256
    assert snapshot.pixel(15, 15)
    assert not snapshot.pixel(16, 0)


def test_clear_screen(make_emulator) -> None:
    emu = make_emulator(0xD015, 0x00E0)
    emu.run(2)
    assert emu.state.display.snapshot().lit_count() == 0


def test_low_res_does_not_leave_extended_mode(make_emulator) -> None:
    emu = make_emulator(0x00FF, 0x00FE)
    emu.run(2)
    assert emu.state.display.extended


def test_scroll_down_moves_rows(make_emulator) -> None:
    emu = make_emulator(0xA000, 0xD011, 0x00C2)
    emu.run(3)
    display = emu.state.display
    assert not display.get_pixel(0, 0)
    assert display.get_pixel(0, 2)


def test_scroll_left_and_right(make_emulator) -> None:
    emu = make_emulator(0x6108, 0xD101, 0x00FB, 0x00FC, 0x00FC)
    emu.run(3)
    assert emu.state.display.get_pixel(12, 0)
    assert not emu.state.display.get_pixel(8, 0)
    emu.run(2)
    assert emu.state.display.get_pixel(4, 0)
    assert not emu.state.display.get_pixel(8, 0)
