"""
BB8 Emulator: Control Signal Vector

The control unit recomputes the full set of control lines every tick and
hands the result to every board. Nothing accumulates: a line that is not
asserted by this tick's decode is low.

Line names follow the breadboard labels:
  AI / AO   A register in / out
  BI        B register in
  OI        output register in
  MI        memory address register in
  II / IO   instruction register in / out (low nibble)
  EO        ALU result out ("sum out")
  SU        ALU subtract select
  FI        flags register in
  CO / J    program counter out / jump (load from bus)
  CE        program counter count enable
  RI / RO   RAM in / out
  HLT       halt (gates the clock)
  CLR       clear / reset
"""

from dataclasses import dataclass, fields
from typing import List


@dataclass(frozen=True)
class ControlSignals:
    """One tick's worth of control lines. All default to low."""
    a_in: bool = False
    a_out: bool = False
    b_in: bool = False
    out_in: bool = False
    mar_in: bool = False
    ir_in: bool = False
    ir_out: bool = False
    alu_out: bool = False
    subtract: bool = False
    flags_in: bool = False
    pc_out: bool = False
    jump: bool = False
    pc_enable: bool = False
    ram_in: bool = False
    ram_out: bool = False
    halt: bool = False
    clear: bool = False

    def active(self) -> List[str]:
        """Breadboard labels of every asserted line, in declaration order."""
        return [LABELS[f.name] for f in fields(self) if getattr(self, f.name)]

    def display(self) -> str:
        names = self.active()
        return ', '.join(names) if names else 'none'


LABELS = {
    'a_in': 'AI',
    'a_out': 'AO',
    'b_in': 'BI',
    'out_in': 'OI',
    'mar_in': 'MI',
    'ir_in': 'II',
    'ir_out': 'IO',
    'alu_out': 'EO',
    'subtract': 'SU',
    'flags_in': 'FI',
    'pc_out': 'CO',
    'jump': 'J',
    'pc_enable': 'CE',
    'ram_in': 'RI',
    'ram_out': 'RO',
    'halt': 'HLT',
    'clear': 'CLR',
}

# All lines low. Boards start from this before the control unit first ticks.
IDLE = ControlSignals()
