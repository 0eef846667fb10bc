import pytest

from chip8.events import ExecutionStopped, RunStateChanged
from chip8.service import EmulatorService


@pytest.fixture
def service(program, sink):
    svc = EmulatorService(program(0x00E0, 0x1202), sinks=[sink])
    yield svc
    svc.close()


def test_listing_built_once_from_program(service) -> None:
    assert service.listing.lines() == (
        "200: #00E0 - clear screen",
        "202: #1202 - jump 0x202",
    )


def test_controls_before_start_raise(service) -> None:
    with pytest.raises(RuntimeError):
        service.pause(True)
    with pytest.raises(RuntimeError):
        service.reset()


def test_reset_keeps_pause_flag(service, sink) -> None:
    first = service.start()
    service.pause(True)
    assert service.paused

    second = service.reset()

    assert second is not first
    assert first.stopped
    assert second.paused
    assert service.paused
    assert sink.of_type(RunStateChanged) == [
        RunStateChanged(paused=True),
        RunStateChanged(paused=False),
        RunStateChanged(paused=True),
    ]
    assert sink.of_type(ExecutionStopped) == [ExecutionStopped(None)]


def test_reset_while_running_stays_running(service, sink) -> None:
    first = service.start()
    second = service.reset()
    assert first.stopped
    assert not second.paused
    assert not service.paused
    assert sink.of_type(RunStateChanged) == []


def test_reset_restarts_from_program_start(service) -> None:
    service.start(paused=True)
    service.step()
    assert service.current_listing_row() == 1
    executor = service.reset()
    assert executor.emulator.state.pc == 0x200
    assert service.current_listing_row() == 0


def test_instruction_delay_survives_reset(service) -> None:
    service.start()
    service.set_instruction_delay(8)
    assert service.executor.instruction_delay_ms == pytest.approx(8)
    executor = service.reset()
    assert executor.instruction_delay_ms == pytest.approx(8)
    with pytest.raises(ValueError):
        service.set_instruction_delay(-2)


def test_reset_after_error(program, sink) -> None:
    with EmulatorService(program(0x0123), sinks=[sink]) as svc:
        first = svc.start()
        assert first.wait(2.0)
        assert first.error is not None
        svc.reset()
    assert len(sink.of_type(ExecutionStopped)) == 2


def test_listing_row_points_at_faulting_instruction(program, sink) -> None:
    with EmulatorService(program(0x00E0, 0x0123), sinks=[sink]) as svc:
        executor = svc.start()
        assert executor.wait(2.0)
        assert executor.error is not None
        assert svc.current_listing_row() == 1


def test_start_twice_raises(service) -> None:
    service.start()
    with pytest.raises(RuntimeError):
        service.start()


def test_close_stops_executor(service) -> None:
    executor = service.start(paused=True)
    service.close()
    assert executor.stopped
    assert executor.wait(0)


def test_key_and_display_requests_forwarded(service) -> None:
    executor = service.start(paused=True)
    service.key_down(3)
    assert executor.emulator.state.keypad.is_pressed(3)
    service.key_up(3)
    assert not executor.emulator.state.keypad.is_pressed(3)
    service.enable_extended_screen_mode()
    assert executor.emulator.state.display.extended


def test_from_file(tmp_path, sink) -> None:
    rom = tmp_path / "prog.ch8"
    rom.write_bytes(bytes([0x12, 0x00]))
    svc = EmulatorService.from_file(rom, sinks=[sink])
    assert svc.program == b"\x12\x00"
    assert len(svc.listing) == 1
