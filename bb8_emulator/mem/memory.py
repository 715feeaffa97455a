"""
BB8 Emulator: 16-Byte RAM Board

Memory map:
  $0-$F  RAM (16 x 8 bits), program and data share the same cells

The address lines come straight from the memory address register's
buffer, read every tick (not latched by the RAM). CLR is not wired to
this board, so a reset leaves the program in place.

  RI + rising edge -> write the bus into RAM[MAR]
  RO               -> drive RAM[MAR] onto the bus every tick it is held
"""

import logging
from typing import Iterable, Optional

from ..bus import Bus
from ..constants import MEMORY_SIZE, NIBBLE_MASK
from ..cpu.regs import AddressRegister, ClockedBoard
from ..signals import ControlSignals

log = logging.getLogger(__name__)


class Memory(ClockedBoard):
    """16-byte RAM addressed by the MAR."""

    __slots__ = ('bus', 'mar', '_mem')

    name = 'RAM'

    def __init__(self, bus: Bus, mar: AddressRegister):
        super().__init__()
        self.bus = bus
        self.mar = mar
        self._mem = bytearray(MEMORY_SIZE)

    @property
    def address(self) -> int:
        return self.mar.value & NIBBLE_MASK

    def tick(self, clk: bool, sig: ControlSignals):
        rising, _ = self._edges(clk)

        if rising and sig.ram_in:
            self._mem[self.address] = self.bus.value

        if sig.ram_out:
            self.bus.drive(self._mem[self.address], self.name)

    def snapshot(self) -> bytes:
        return bytes(self._mem)

    # --- Bulk load ---

    def load(self, data: Iterable[int]) -> bool:
        """Overwrite RAM from address 0 with up to 16 bytes.

        Cells past the end of a short image keep their previous contents.
        Returns True if the image was longer than RAM and got truncated;
        that is reported, not raised.
        """
        data = bytes(data)
        truncated = len(data) > MEMORY_SIZE
        if truncated:
            log.warning("Program image is %d bytes, only the first %d were loaded",
                        len(data), MEMORY_SIZE)
            data = data[:MEMORY_SIZE]
        self._mem[:len(data)] = data
        return truncated

    # --- Display ---

    def display(self, clk: bool = False, sig: Optional[ControlSignals] = None) -> str:
        active = ['CLK'] if clk else []
        if sig is not None:
            active += [n for n, on in (('RI', sig.ram_in), ('RO', sig.ram_out)) if on]
        return (f"Addr: {self.address:04b}, MEM: {self._mem[self.address]:08b}"
                f"  control: {', '.join(active) or 'none'}")

    def hexdump(self) -> str:
        """Both rows of RAM, 8 cells each."""
        lines = []
        for start in range(0, MEMORY_SIZE, 8):
            row = ' '.join(f'{b:02X}' for b in self._mem[start:start + 8])
            lines.append(f'{start:X}  {row}')
        return '\n'.join(lines)
