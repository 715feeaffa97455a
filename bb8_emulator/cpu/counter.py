"""
BB8 Emulator: Program Counter Board

4-bit binary counter (74LS161 on the breadboard).

Rising edge:
  J  asserted -> load the bus low nibble
  CE asserted -> increment, wrapping 15 -> 0
  If both were ever asserted together, J wins. The control table never
  does this; the tie-break is fixed so behaviour stays deterministic.
Level-sensitive:
  CLR -> counter = 0 (overrides the edge logic in the same tick)
  CO  -> drive the counter onto the bus every tick it is held
"""

from typing import Optional

from ..bus import Bus
from ..constants import NIBBLE_MASK
from ..signals import ControlSignals
from .regs import ClockedBoard


class ProgramCounter(ClockedBoard):
    """4-bit program counter with jump load."""

    __slots__ = ('bus', 'value')

    name = 'PC'

    def __init__(self, bus: Bus):
        super().__init__()
        self.bus = bus
        self.value: int = 0

    def tick(self, clk: bool, sig: ControlSignals):
        rising, _ = self._edges(clk)

        if rising:
            if sig.jump:
                self.value = self.bus.value & NIBBLE_MASK
            elif sig.pc_enable:
                self.value = (self.value + 1) & NIBBLE_MASK

        if sig.clear:
            self.value = 0

        if sig.pc_out:
            self.bus.drive(self.value, self.name)

    def display(self, clk: bool = False, sig: Optional[ControlSignals] = None) -> str:
        active = ['CLK'] if clk else []
        if sig is not None:
            active += [n for n, on in (('CLR', sig.clear), ('CO', sig.pc_out),
                                       ('J', sig.jump), ('CE', sig.pc_enable)) if on]
        return f"CNT: {self.value:04b}  control: {', '.join(active) or 'none'}"
