"""
BB8 Emulator: Clock Board

One tick is one half clock period. The oscillator toggles the level
every tick unless HLT is latched, in which case the level is forced low
and stays there. Every other board finds its own rising/falling edges by
comparing the level against the one it saw on its previous tick.
"""


class Clock:
    """Clock oscillator gated by the halt latch."""

    __slots__ = ('level',)

    def __init__(self):
        self.level: bool = False

    def tick(self, halt: bool) -> bool:
        if halt:
            self.level = False
        else:
            self.level = not self.level
        return self.level

    def display(self, halt: bool = False) -> str:
        return f"CLK: {int(self.level)}  control: {'HLT' if halt else 'none'}"
