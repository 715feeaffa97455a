# BB8 Emulator: board-level simulator for the 8-bit breadboard computer
# Part of the bb8sim toolchain
#
# Each board (clock, registers, ALU, program counter, RAM, control logic)
# is its own class with a tick() method. The orchestrator in emu.py owns
# the shared bus and calls every board once per half clock period in a
# fixed order, so all timing comes from that order plus per-board edge
# detection.
"""BB8 breadboard computer emulation core."""

from .constants import MEMORY_SIZE, MICRO_STEPS, RESET_HOLD_TICKS, DEFAULT_MAX_TICKS
from .emu import BB8Emulator, StopReason

__all__ = [
    'BB8Emulator', 'StopReason',
    'MEMORY_SIZE', 'MICRO_STEPS', 'RESET_HOLD_TICKS', 'DEFAULT_MAX_TICKS',
]
