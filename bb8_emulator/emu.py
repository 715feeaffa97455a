"""
BB8 Emulator: Main Emulator Class

Wires every board of the breadboard computer to one shared bus and to
the control unit's signal vector, then drives them one half clock period
at a time.

Tick order (fixed; it *is* the timing model):
  1. Clock            toggles, or held low while HLT is latched
  2. Control logic    step counter + control vector for this tick
  3. A register
  4. B register
  5. Output register
  6. ALU + flags
  7. Memory address register
  8. RAM
  9. Program counter
 10. Instruction register

A board that ticks before the bus driver sees the value driven on the
previous tick. If two boards ever drove the bus in one tick the later
one in this list would win; the microcode never does that.

Stepping API:
  tick() / half_step()          one half clock period
  full_step()                   one full clock period (two ticks)
  run_to_instruction_boundary() until step 4 with the clock high
  run_to_halt()                 until HLT; no cap, loops forever on a
                                program that never halts
  run(max_ticks)                same, but gives up after max_ticks
  reset()                       CLR pulse, then two ticks
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from .bus import Bus
from .constants import DEFAULT_MAX_TICKS, MICRO_STEPS
from .cpu.alu import ArithmeticUnit
from .cpu.clock import Clock
from .cpu.control import ControlUnit
from .cpu.counter import ProgramCounter
from .cpu.opcodes import mnemonic
from .cpu.regs import AddressRegister, InstructionRegister, Register
from .mem.memory import Memory
from .signals import ControlSignals

log = logging.getLogger(__name__)

LAST_STEP = MICRO_STEPS - 1


class StopReason(Enum):
    HALT = 'HALT'
    TIMEOUT = 'TIMEOUT'


class BB8Emulator:
    """The complete breadboard computer.

    Usage:
        emu = BB8Emulator()
        emu.load_memory(assemble(source))
        emu.reset()
        emu.run_to_halt()
        print(emu.output)
    """

    DEFAULT_MAX_TICKS = DEFAULT_MAX_TICKS

    def __init__(self):
        self.bus = Bus()
        self.clock = Clock()

        self.a = Register('A', self.bus, enable_in='a_in', enable_out='a_out')
        self.b = Register('B', self.bus, enable_in='b_in')
        self.out = Register('OUT', self.bus, enable_in='out_in')
        self.alu = ArithmeticUnit(self.bus, self.a, self.b)
        self.mar = AddressRegister(self.bus)
        self.ram = Memory(self.bus, self.mar)
        self.pc = ProgramCounter(self.bus)
        self.ir = InstructionRegister(self.bus)

        self.control = ControlUnit(self.ir, self.alu)

        # Boards ticked after the control unit, in bus order.
        self._boards = (self.a, self.b, self.out, self.alu,
                        self.mar, self.ram, self.pc, self.ir)

        self.ticks: int = 0

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_memory(self, data: Iterable[int]) -> bool:
        """Bulk-load a program image into RAM. Returns True if truncated."""
        return self.ram.load(data)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def tick(self):
        """Advance one half clock period."""
        clk = self.clock.tick(self.control.halted)
        sig = self.control.tick(clk)
        if sig.clear:
            self.bus.clear()
        for board in self._boards:
            board.tick(clk, sig)
        self.ticks += 1

    half_step = tick

    def full_step(self):
        """Advance one full clock period."""
        self.tick()
        self.tick()

    def run_to_instruction_boundary(self):
        """Run until the last micro-step has latched (step 4, clock high).

        Always ticks at least once, so repeated calls walk through the
        program one instruction at a time. Returns straight away once HLT
        is latched: a stopped clock never reaches another boundary.
        """
        if self.control.halted:
            return
        self.tick()
        while not self.at_instruction_boundary:
            if self.control.halted:
                return
            self.tick()

    def run_to_halt(self):
        """Tick until HLT is latched. No iteration cap."""
        while not self.control.halted:
            self.tick()

    def run(self, max_ticks: Optional[int] = None) -> StopReason:
        """Tick until HLT or until max_ticks ticks have run."""
        if max_ticks is None:
            max_ticks = self.DEFAULT_MAX_TICKS
        for _ in range(max_ticks):
            if self.control.halted:
                return StopReason.HALT
            self.tick()
        if self.control.halted:
            return StopReason.HALT
        log.warning("Tick limit reached (%d ticks) without HLT, PC=%d", max_ticks, self.pc.value)
        return StopReason.TIMEOUT

    def reset(self):
        """Pulse CLR through every board: registers, PC, flags, step, HLT."""
        self.control.reset()
        self.tick()
        self.tick()

    # ══════════════════════════════════════════════
    # Observable state
    # ══════════════════════════════════════════════

    @property
    def at_instruction_boundary(self) -> bool:
        return self.control.step == LAST_STEP and self.clock.level

    @property
    def bus_value(self) -> int:
        return self.bus.value

    @property
    def clock_level(self) -> bool:
        return self.clock.level

    @property
    def signals(self) -> ControlSignals:
        return self.control.signals

    @property
    def micro_step(self) -> int:
        return self.control.step

    @property
    def halted(self) -> bool:
        return self.control.halted

    @property
    def carry(self) -> bool:
        return self.alu.carry

    @property
    def zero(self) -> bool:
        return self.alu.zero

    @property
    def output(self) -> int:
        return self.out.value

    @property
    def memory(self) -> bytes:
        return self.ram.snapshot()

    # --- Display ---

    def summary(self) -> str:
        """One-line state, used for instruction traces."""
        flags = ('C' if self.carry else '.') + ('Z' if self.zero else '.')
        return (f"PC={self.pc.value:X} IR={self.ir.value:02X} {mnemonic(self.ir.value):<7s} "
                f"A={self.a.value:02X} B={self.b.value:02X} OUT={self.out.value:3d} "
                f"[{flags}] step={self.control.step} ticks={self.ticks}")

    def display(self) -> str:
        """Full board-by-board dump. Not a stable format."""
        clk = self.clock.level
        sig = self.control.signals
        sections = [
            ('bus', self.bus.display()),
            ('clk', self.clock.display(self.control.halted)),
            ('areg', self.a.display(clk, sig)),
            ('breg', self.b.display(clk, sig)),
            ('alu', self.alu.display(clk, sig)),
            ('pc', self.pc.display(clk, sig)),
            ('mar', self.mar.display(clk, sig)),
            ('ram', self.ram.display(clk, sig)),
            ('mem', self.ram.hexdump().replace('\n', '\n  ')),
            ('ir', self.ir.display(clk, sig)),
            ('cl', self.control.display(clk)),
            ('oreg', self.out.display(clk, sig)),
        ]
        return '\n\n'.join(f"{name}:\n  {text}" for name, text in sections)
