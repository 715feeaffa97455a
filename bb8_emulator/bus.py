"""
BB8 Emulator: Shared Data Bus

The bus is not an active board. It is one 8-bit cell that every board
holds a reference to. Any number of boards read it in a tick; only the
board whose output-enable is asserted writes it. The control unit's
decode table guarantees a single writer per tick. The cell does not
check this: if two boards drive in the same tick, the later one in the
orchestrator's tick order wins.

The cell keeps its last value between ticks. Boards that tick before the
driver (e.g. the A register capturing the ALU result) see the value that
was driven on the previous tick, which is how edge-captured transfers
across the bus work on the real breadboard.

While CLR is asserted the orchestrator pulls the cell to 0, so the first
fetch after a reset always latches address 0 into the MAR.
"""

from typing import Optional

from .constants import DATA_MASK


class Bus:
    """Single shared 8-bit bus cell."""

    __slots__ = ('_value', 'driver')

    def __init__(self):
        self._value: int = 0
        self.driver: Optional[str] = None   # name of the last board that drove

    @property
    def value(self) -> int:
        return self._value

    def read(self) -> int:
        return self._value

    def drive(self, value: int, driver: Optional[str] = None):
        """Put a value on the bus (masked to 8 bits)."""
        self._value = value & DATA_MASK
        self.driver = driver

    def clear(self):
        """Pull the bus low. Held by CLR so no stale value survives a reset."""
        self._value = 0
        self.driver = None

    def display(self) -> str:
        src = self.driver or 'none'
        return f"BUS: {self._value:08b} (${self._value:02X}) driven by {src}"
