#!/usr/bin/env python3
"""Command line entry point: disassemble or run a CHIP-8 program headless."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import MachineConfig
from .debug import DisplayRenderer, MemoryInspector
from .disassembler import ProgramListing
from .errors import Chip8Error
from .events import ExecutionStopped, RecordingSink
from .loader import ProgramLoader
from .service import EmulatorService

logger = logging.getLogger(__name__)

DELAY_CHOICES_MS = (1, 2, 4, 8, 16, 32, 64)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8", description="CHIP-8 emulator")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    disasm = sub.add_parser("disasm", help="Print the program listing")
    disasm.add_argument("rom", help="Program image")
    disasm.add_argument(
        "--start",
        type=lambda value: int(value, 0),
        default=None,
        help="Load address (default from config, 0x200)",
    )

    run = sub.add_parser("run", help="Run a program without a window")
    run.add_argument("rom", help="Program image")
    run.add_argument(
        "--seconds", type=float, default=2.0, help="Wall clock run time"
    )
    run.add_argument(
        "--delay",
        type=int,
        choices=DELAY_CHOICES_MS,
        default=None,
        help="Instruction delay in milliseconds",
    )
    run.add_argument("--config", type=str, help="MachineConfig JSON file")
    run.add_argument(
        "--model",
        choices=["CHIP-8", "COSMAC-VIP", "SUPER-CHIP"],
        default=None,
        help="Interpreter preset (ignored with --config)",
    )
    run.add_argument("--save-screen", type=str, help="Save the last frame as PNG")
    run.add_argument("--scale", type=int, default=10, help="PNG pixel scale")
    run.add_argument("--perfetto", type=str, help="Write a Perfetto trace here")
    run.add_argument(
        "--dump-memory",
        action="store_true",
        help="Print a hex dump of the program area after the run",
    )
    return parser


def _load_config(args: argparse.Namespace) -> MachineConfig:
    if getattr(args, "config", None):
        return MachineConfig.load(args.config)
    if getattr(args, "model", None):
        return MachineConfig.for_model(args.model)
    return MachineConfig()


def _cmd_disasm(args: argparse.Namespace) -> int:
    config = MachineConfig()
    start = config.program_start if args.start is None else args.start
    program = ProgramLoader(start).load(args.rom)
    for line in ProgramListing(program, start).lines():
        print(line)
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    config = _load_config(args)
    stops = RecordingSink()
    sinks: List[object] = [stops]

    observer = None
    if args.perfetto:
        from .tracing import PerfettoObserver

        observer = PerfettoObserver()
        observer.tracer.start(args.perfetto)
        sinks.append(observer)

    service = EmulatorService.from_file(args.rom, config=config, sinks=sinks)
    if args.delay is not None:
        service.set_instruction_delay(args.delay)

    try:
        executor = service.start()
        executor.wait(args.seconds)
    finally:
        service.close()
        if observer is not None:
            observer.tracer.stop()

    emulator = executor.emulator
    snapshot = emulator.snapshot()

    cpu = snapshot.cpu
    print(
        f"PC={cpu.pc:03X} I={cpu.index:03X} "
        + " ".join(f"V{i:X}={value:02X}" for i, value in enumerate(cpu.registers))
    )

    if args.save_screen:
        DisplayRenderer(scale=args.scale).save_display(snapshot.display, args.save_screen)
        logger.info("Saved screen to %s", args.save_screen)

    if args.dump_memory:
        memory = emulator.state.memory
        length = min(len(service.program) or 16, len(memory) - config.program_start)
        print(MemoryInspector(memory).dump_memory(config.program_start, length))

    errors = [
        event.error
        for event in stops.of_type(ExecutionStopped)
        if event.error is not None
    ]
    if errors:
        print(f"error: {errors[0]}", file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "disasm":
            return _cmd_disasm(args)
        return _cmd_run(args)
    except (OSError, Chip8Error) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
