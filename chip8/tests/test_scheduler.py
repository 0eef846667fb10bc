import pytest

from chip8.scheduler import InstructionClock, TimerScheduler


def test_timer_counts_elapsed_periods() -> None:
    scheduler = TimerScheduler(period=1 / 60)
    scheduler.reset(0.0)
    assert scheduler.advance(0.01) == 0
    assert scheduler.advance(0.02) == 1
    assert scheduler.advance(2.001) == 119


def test_timer_catches_up_after_late_wakeup() -> None:
    scheduler = TimerScheduler(period=0.5)
    scheduler.reset(10.0)
    assert scheduler.advance(12.2) == 4
    assert scheduler.next_deadline == pytest.approx(12.5)


def test_timer_rejects_non_positive_period() -> None:
    with pytest.raises(ValueError):
        TimerScheduler(period=0)


def test_instruction_clock_paces_by_delay() -> None:
    clock = InstructionClock(delay=0.004)
    clock.reset(0.0)
    assert clock.due(0.0)
    clock.consume(0.0)
    assert not clock.due(0.003)
    assert clock.due(0.004)


def test_instruction_clock_zero_delay_is_always_due() -> None:
    clock = InstructionClock(delay=0.0)
    clock.reset(5.0)
    for _ in range(3):
        assert clock.due(5.0)
        clock.consume(5.0)


def test_instruction_clock_paused_is_never_due() -> None:
    clock = InstructionClock(delay=0.0, paused=True)
    assert not clock.due(1.0)


def test_set_delay_reschedules_from_now() -> None:
    clock = InstructionClock(delay=0.001)
    clock.reset(0.0)
    clock.set_delay(0.064, 1.0)
    assert not clock.due(1.05)
    assert clock.due(1.065)
