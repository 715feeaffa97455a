#!/usr/bin/env python3
"""
bb8sim: BB8 breadboard computer simulator CLI

Usage:
    bb8sim <program.asm|program.bin> [--format asm|bin] [--max-ticks N]
                                     [--trace] [--listing] [--dump]
                                     [--verbose] [--quiet] [--log-file PATH]

Input format is auto-detected from file extension:
    .bin       → raw RAM image (first 16 bytes are loaded)
    other      → assembly source, assembled before loading

Examples:
    bb8sim examples/multiply.asm              # run, print the output register
    bb8sim multiply.asm --trace               # one state line per instruction
    bb8sim multiply.asm --listing             # show the assembled image, don't run
    bb8sim counter.bin --max-ticks 5000 --dump

Exit status: 0 halted, 1 input/assembly error, 2 tick limit reached.
"""

import argparse
import logging
import os
import sys

from bb8_assembler import Assembler, AssemblerError, disassemble
from bb8_emulator import BB8Emulator, StopReason, DEFAULT_MAX_TICKS, MEMORY_SIZE
from bb8_emulator.log_setup import setup_logging

__version__ = "0.1.0"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_TIMEOUT = 2

log = logging.getLogger('bb8sim')


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...), $ prefix, or decimal."""
    value = value.strip()
    if value.startswith("0x") or value.startswith("0X"):
        return int(value, 16)
    if value.startswith("$"):
        return int(value[1:], 16)
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bb8sim",
        description="Board-level simulator for the 8-bit breadboard computer",
    )
    parser.add_argument("input", help="Assembly source or raw .bin RAM image")
    parser.add_argument("--format", choices=["asm", "bin"], default=None,
                        help="Input format (auto-detected from extension if not set)")
    parser.add_argument("--max-ticks", type=parse_int_arg, default=DEFAULT_MAX_TICKS,
                        help=f"Give up after this many half clock periods (default: {DEFAULT_MAX_TICKS})")
    parser.add_argument("--trace", action="store_true",
                        help="Log one state line per executed instruction")
    parser.add_argument("--listing", action="store_true",
                        help="Print the assembled image and exit without running")
    parser.add_argument("--dump", action="store_true",
                        help="Print every board's state after the run")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only log errors")
    parser.add_argument("--log-file", default=None,
                        help="Also write a DEBUG log to this file")
    parser.add_argument("--plain-log", action="store_true",
                        help="Plain stderr logging instead of rich output")
    parser.add_argument("--version", action="version",
                        version=f"bb8sim {__version__}")
    return parser


def _console_level(args) -> int:
    if args.quiet:
        return logging.ERROR
    if args.verbose >= 2:
        return logging.DEBUG
    if args.verbose == 1 or args.trace:
        return logging.INFO
    return logging.WARNING


def load_image(args):
    """Read the input file and return (image, assembler or None)."""
    if args.format:
        in_format = args.format
    else:
        ext = os.path.splitext(args.input)[1].lower()
        in_format = 'bin' if ext == '.bin' else 'asm'

    if in_format == 'bin':
        with open(args.input, "rb") as f:
            return f.read(), None

    with open(args.input, "r", encoding="utf-8") as f:
        source = f.read()
    asm = Assembler()
    return asm.assemble(source), asm


def run_traced(emu: BB8Emulator, max_ticks: int) -> StopReason:
    """Step one instruction at a time, logging the state after each."""
    limit = emu.ticks + max_ticks
    while not emu.halted:
        if emu.ticks >= limit:
            log.warning("Tick limit reached (%d ticks) without HLT, PC=%d", max_ticks, emu.pc.value)
            return StopReason.TIMEOUT
        emu.run_to_instruction_boundary()
        log.info(emu.summary())
    return StopReason.HALT


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(console_level=_console_level(args), log_file=args.log_file,
                  rich_console=not args.plain_log)

    log.debug("Input: %s", args.input)

    try:
        image, asm = load_image(args)
    except FileNotFoundError:
        log.error("File not found: %s", args.input)
        return EXIT_ERROR
    except OSError as e:
        log.error("Error reading %s: %s", args.input, e)
        return EXIT_ERROR
    except UnicodeDecodeError as e:
        log.error("%s is not valid UTF-8 text: %s", args.input, e)
        return EXIT_ERROR
    except AssemblerError as e:
        log.error("Assembly failed: %s", e)
        return EXIT_ERROR

    if args.listing:
        print(asm.get_listing() if asm is not None else disassemble(image[:MEMORY_SIZE]))
        return EXIT_OK

    emu = BB8Emulator()
    emu.load_memory(image)
    emu.reset()

    if args.trace:
        reason = run_traced(emu, args.max_ticks)
    else:
        reason = emu.run(args.max_ticks)

    if args.dump:
        print(emu.display())
        print()

    if reason is StopReason.TIMEOUT:
        log.error("Program did not halt within %d ticks", args.max_ticks)
        return EXIT_TIMEOUT

    log.info("Halted after %d ticks", emu.ticks)
    print(f"OUT: {emu.output}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
