"""
BB8 Emulator: Control Logic Board (micro-sequencer)

Replaces the two EEPROMs + 74LS161 step counter of the breadboard build.
The step counter advances on every *falling* clock edge, so the control
lines for a step are stable before the rising edge that the other boards
latch on. After step 4 the counter wraps to 0 and the next fetch starts.

Every tick the full control vector is rebuilt from scratch:

  1. falling edge -> step += 1 (wrap 5 -> 0)
  2. start from all lines low
  3. reset pending -> step = 0, HLT released, hold CLR for its two
     ticks, derive nothing else
  4. otherwise look up (opcode, step) in the microcode tables

Fetch (every instruction):
  step 0   CO MI        MAR <- PC
  step 1   RO II CE     IR  <- RAM[MAR], PC++

Execute: see MICROCODE below. JC/JZ only assert IO+J when the committed
flag is set. HLT sets the halt latch, which stays set until reset.
Opcodes missing from the table decode to no lines at all.
"""

import logging
from dataclasses import replace
from typing import Dict, Optional, Tuple

from ..constants import MICRO_STEPS, RESET_HOLD_TICKS
from ..signals import ControlSignals, IDLE
from .alu import ArithmeticUnit
from .opcodes import Opcode, decode
from .regs import ClockedBoard, InstructionRegister

log = logging.getLogger(__name__)


FETCH: Dict[int, ControlSignals] = {
    0: ControlSignals(pc_out=True, mar_in=True),
    1: ControlSignals(ram_out=True, ir_in=True, pc_enable=True),
}

MICROCODE: Dict[Tuple[Opcode, int], ControlSignals] = {
    (Opcode.LDA, 2): ControlSignals(ir_out=True, mar_in=True),
    (Opcode.LDA, 3): ControlSignals(ram_out=True, a_in=True),

    (Opcode.ADD, 2): ControlSignals(ir_out=True, mar_in=True),
    (Opcode.ADD, 3): ControlSignals(ram_out=True, b_in=True),
    (Opcode.ADD, 4): ControlSignals(alu_out=True, a_in=True, flags_in=True),

    (Opcode.SUB, 2): ControlSignals(ir_out=True, mar_in=True),
    (Opcode.SUB, 3): ControlSignals(ram_out=True, b_in=True),
    (Opcode.SUB, 4): ControlSignals(alu_out=True, a_in=True, subtract=True, flags_in=True),

    (Opcode.STA, 2): ControlSignals(ir_out=True, mar_in=True),
    (Opcode.STA, 3): ControlSignals(a_out=True, ram_in=True),

    (Opcode.LDI, 2): ControlSignals(ir_out=True, a_in=True),

    (Opcode.JMP, 2): ControlSignals(ir_out=True, jump=True),
    (Opcode.JC, 2): ControlSignals(ir_out=True, jump=True),
    (Opcode.JZ, 2): ControlSignals(ir_out=True, jump=True),

    (Opcode.OUT, 2): ControlSignals(a_out=True, out_in=True),
}

# Conditional jumps: opcode -> name of the committed ALU flag gating it.
CONDITIONS = {
    Opcode.JC: 'carry',
    Opcode.JZ: 'zero',
}

HALT_STEP = 2


class ControlUnit(ClockedBoard):
    """Micro-sequencer deriving the control vector from IR and step."""

    __slots__ = ('ir', 'alu', 'step', 'halted', 'clearing', '_reset_hold', 'signals')

    name = 'CL'

    def __init__(self, ir: InstructionRegister, alu: ArithmeticUnit):
        super().__init__()
        self.ir = ir
        self.alu = alu
        self.step: int = 0
        self.halted: bool = False
        self.clearing: bool = False
        self._reset_hold: int = 0
        self.signals: ControlSignals = IDLE

    def reset(self):
        """Assert CLR; it releases itself after RESET_HOLD_TICKS ticks."""
        log.debug("Reset requested")
        self.clearing = True
        self._reset_hold = RESET_HOLD_TICKS

    def tick(self, clk: bool) -> ControlSignals:
        _, falling = self._edges(clk)

        if falling:
            self.step += 1
        if self.step == MICRO_STEPS:
            self.step = 0

        if self.clearing:
            self.step = 0
            self.halted = False
            self._reset_hold -= 1
            if self._reset_hold <= 0:
                self._reset_hold = 0
                self.clearing = False
                log.debug("Reset released")
            self.signals = ControlSignals(clear=self.clearing)
            return self.signals

        self.signals = self._derive(falling)
        return self.signals

    def _derive(self, falling: bool) -> ControlSignals:
        if self.step in FETCH:
            sig = FETCH[self.step]
        else:
            sig = self._execute(falling)

        if self.halted:
            sig = replace(sig, halt=True)
        return sig

    def _execute(self, falling: bool) -> ControlSignals:
        op = decode(self.ir.value)

        if op is None:
            if falling and self.step == HALT_STEP:
                log.debug("Opcode $%X has no microcode, running as NOP", self.ir.opcode)
            return IDLE

        if op is Opcode.HLT:
            if self.step == HALT_STEP and not self.halted:
                self.halted = True
                log.info("HLT latched")
            return IDLE

        sig = MICROCODE.get((op, self.step), IDLE)
        flag = CONDITIONS.get(op)
        if flag is not None and not getattr(self.alu, flag):
            return IDLE
        return sig

    @property
    def opcode(self) -> Optional[Opcode]:
        return decode(self.ir.value)

    def display(self, clk: bool = False) -> str:
        op = self.opcode
        name = op.name if op is not None else '???'
        flags = [n for n, on in (('CF', self.alu.carry), ('ZF', self.alu.zero)) if on]
        return (f"Inst: {self.ir.opcode:04b} ({name}), CNT: {self.step:03b}\n"
                f"  status: {', '.join(flags) or 'none'}  lines: {self.signals.display()}"
                f"  clock: {'CLK' if clk else 'none'}")
