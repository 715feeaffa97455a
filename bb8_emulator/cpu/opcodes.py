"""
BB8 Emulator: Instruction Set

Encoding: one byte per instruction, high nibble = opcode, low nibble =
operand. The operand is a RAM address (LDA ADD SUB STA JMP JC JZ), an
immediate value (LDI) or ignored (NOP OUT HLT).

  0x0 NOP  no operation
  0x1 LDA  A = RAM[addr]
  0x2 ADD  A = A + RAM[addr], flags updated
  0x3 SUB  A = A - RAM[addr], flags updated
  0x4 STA  RAM[addr] = A
  0x5 LDI  A = imm (0-15)
  0x6 JMP  PC = addr
  0x7 JC   PC = addr if carry
  0x8 JZ   PC = addr if zero
  0xE OUT  OUT = A
  0xF HLT  stop the clock

0x9-0xD are not wired to anything in the control ROM and run as NOPs.
"""

from enum import IntEnum
from typing import Optional


class Opcode(IntEnum):
    NOP = 0x0
    LDA = 0x1
    ADD = 0x2
    SUB = 0x3
    STA = 0x4
    LDI = 0x5
    JMP = 0x6
    JC = 0x7
    JZ = 0x8
    OUT = 0xE
    HLT = 0xF

    @property
    def has_operand(self) -> bool:
        return self not in NO_OPERAND


NO_OPERAND = frozenset({Opcode.NOP, Opcode.OUT, Opcode.HLT})

_BY_VALUE = {op.value: op for op in Opcode}


def decode(byte: int) -> Optional[Opcode]:
    """Return the Opcode in the high nibble of an instruction byte, or None."""
    return _BY_VALUE.get((byte >> 4) & 0x0F)


def mnemonic(byte: int) -> str:
    """Render one instruction byte, e.g. 0x2E -> 'ADD 14'."""
    op = decode(byte)
    if op is None:
        return f'??? ${byte:02X}'
    if op.has_operand:
        return f'{op.name} {byte & 0x0F}'
    return op.name
