"""
BB8 Emulator: Register Boards

Register model for the breadboard computer:
  A    8-bit accumulator, in (AI) and out (AO). Feeds the ALU continuously.
  B    8-bit operand register, in only (BI). Feeds the ALU continuously.
  OUT  8-bit output (display) register, in only (OI).
  IR   instruction register, in (II) and out (IO). Only the low nibble
       (operand) is driven onto the bus; the high nibble (opcode) goes
       straight to the control logic.
  MAR  4-bit memory address register, in only (MI). Wired to the RAM
       address lines, never to the bus as a driver.

Every register follows the same per-tick priority:
  1. rising clock edge + enable-in  -> capture the bus
  2. CLR asserted                   -> buffer forced to 0 (beats step 1)
  3. enable-out asserted            -> drive the bus, every tick it is held
"""

from typing import Optional

from ..bus import Bus
from ..constants import DATA_MASK, NIBBLE_MASK
from ..signals import ControlSignals, LABELS


class ClockedBoard:
    """Edge detection shared by every clocked board.

    A board only sees the clock level once per tick, so an edge is the
    difference between this tick's level and the one remembered from the
    previous tick.
    """

    __slots__ = ('_clk_prev',)

    def __init__(self):
        self._clk_prev: bool = False

    def _edges(self, clk: bool):
        """Return (rising, falling) and remember the level."""
        rising = clk and not self._clk_prev
        falling = self._clk_prev and not clk
        self._clk_prev = clk
        return rising, falling


class Register(ClockedBoard):
    """Generic 8-bit latch on the bus.

    enable_in / enable_out name the ControlSignals fields this board
    listens to. A register built without enable_out never drives the bus.
    """

    __slots__ = ('name', 'bus', 'value', 'enable_in', 'enable_out')

    IN_MASK = DATA_MASK
    OUT_MASK = DATA_MASK
    WIDTH = 8

    def __init__(self, name: str, bus: Bus, enable_in: str,
                 enable_out: Optional[str] = None):
        super().__init__()
        self.name = name
        self.bus = bus
        self.value: int = 0
        self.enable_in = enable_in
        self.enable_out = enable_out

    def tick(self, clk: bool, sig: ControlSignals):
        rising, _ = self._edges(clk)

        if rising and getattr(sig, self.enable_in):
            self.value = self.bus.value & self.IN_MASK

        if sig.clear:
            self.value = 0

        if self.enable_out is not None and getattr(sig, self.enable_out):
            self.bus.drive(self.value & self.OUT_MASK, self.name)

    def display(self, clk: bool = False, sig: Optional[ControlSignals] = None) -> str:
        active = []
        if clk:
            active.append('CLK')
        if sig is not None:
            for line in ('clear', self.enable_in, self.enable_out):
                if line is not None and getattr(sig, line):
                    active.append(LABELS[line])
        bits = format(self.value, f'0{self.WIDTH}b')
        return f"BUF: {bits}  control: {', '.join(active) or 'none'}"


class InstructionRegister(Register):
    """Instruction register. Drives only the operand nibble onto the bus."""

    __slots__ = ()

    OUT_MASK = NIBBLE_MASK

    def __init__(self, bus: Bus):
        super().__init__('IR', bus, enable_in='ir_in', enable_out='ir_out')

    @property
    def opcode(self) -> int:
        return (self.value >> 4) & NIBBLE_MASK

    @property
    def operand(self) -> int:
        return self.value & NIBBLE_MASK


class AddressRegister(Register):
    """4-bit memory address register. Captures the bus low nibble, no output."""

    __slots__ = ()

    IN_MASK = NIBBLE_MASK
    WIDTH = 4

    def __init__(self, bus: Bus):
        super().__init__('MAR', bus, enable_in='mar_in', enable_out=None)
