"""
BB8 Emulator: hardware constants

Fixed by the breadboard build: 4 address lines into a 16 x 8 RAM, a
5-state micro-step counter, and a reset pulse that must span one full
clock period (two half-period ticks) so every edge-triggered latch sees it.
"""

DATA_MASK = 0xFF        # 8-bit data bus
NIBBLE_MASK = 0x0F      # 4-bit address / counter / operand

MEMORY_SIZE = 16
MICRO_STEPS = 5
RESET_HOLD_TICKS = 2

# External cap used by BB8Emulator.run() and the CLI. run_to_halt() has none.
DEFAULT_MAX_TICKS = 100_000
