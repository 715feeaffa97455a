"""
BB8 Emulator: ALU Board + Flags Register

The adder is combinational: every tick it recomputes A + B (or A - B
while SU is held) from the live A and B register buffers, whatever the
clock is doing. Carry and zero come out of the adder as *pending* flags.

The flags register is a separate edge-triggered latch. On a rising edge
with FI asserted it copies the pending pair *as it stood before this
tick's recomputation*, i.e. the result the bus has been carrying. The
conditional jumps only ever see these committed flags.

Carry semantics (JC depends on these exactly):
  add: C = (A + B) > 255               unsigned carry out of bit 7
  sub: C = A < B                       borrow, NOT the two's complement
                                       carry the 74LS283 would produce
  Z = 8-bit result == 0
"""

from typing import Optional, Tuple

from ..bus import Bus
from ..constants import DATA_MASK
from ..signals import ControlSignals
from .regs import ClockedBoard, Register


# ══════════════════════════════════════════════
# 8-bit adder functions: return (result, carry, zero)
# ══════════════════════════════════════════════

def add8(a: int, b: int) -> Tuple[int, bool, bool]:
    """Add two 8-bit values. C = unsigned overflow."""
    total = a + b
    result = total & DATA_MASK
    return result, total > DATA_MASK, result == 0


def sub8(a: int, b: int) -> Tuple[int, bool, bool]:
    """Subtract b from a. C = borrow (a < b)."""
    result = (a - b) & DATA_MASK
    return result, a < b, result == 0


class ArithmeticUnit(ClockedBoard):
    """Adder/subtractor wired to the A and B registers, with flags latch."""

    __slots__ = ('bus', 'a', 'b', 'value',
                 'pending_carry', 'pending_zero', 'carry', 'zero')

    name = 'ALU'

    def __init__(self, bus: Bus, a: Register, b: Register):
        super().__init__()
        self.bus = bus
        self.a = a
        self.b = b
        self.value: int = 0                 # live combinational result
        self.pending_carry: bool = False
        self.pending_zero: bool = False
        self.carry: bool = False            # committed (flags register)
        self.zero: bool = False

    def tick(self, clk: bool, sig: ControlSignals):
        rising, _ = self._edges(clk)

        # Commit before recomputing: FI latches last tick's calculation.
        if rising and sig.flags_in:
            self.carry = self.pending_carry
            self.zero = self.pending_zero

        if sig.clear:
            self.carry = False
            self.zero = False

        if sig.subtract:
            self.value, self.pending_carry, self.pending_zero = sub8(self.a.value, self.b.value)
        else:
            self.value, self.pending_carry, self.pending_zero = add8(self.a.value, self.b.value)

        if sig.alu_out:
            self.bus.drive(self.value, self.name)

    def display(self, clk: bool = False, sig: Optional[ControlSignals] = None) -> str:
        flags = [n for n, on in (('CF', self.carry), ('ZF', self.zero)) if on]
        active = ['CLK'] if clk else []
        if sig is not None:
            active += [n for n, on in (('CLR', sig.clear), ('EO', sig.alu_out),
                                       ('SU', sig.subtract), ('FI', sig.flags_in)) if on]
        return (f"BUF: {self.value:08b}, A: {self.a.value:08b}, B: {self.b.value:08b}\n"
                f"  flags: {', '.join(flags) or 'none'}  control: {', '.join(active) or 'none'}")
