"""
BB8 Two-Pass Assembler.

Assembles BB8 assembly text into the 16-byte RAM image the emulator
loads.

Input:  Assembly text
Output: 16 raw bytes (unused cells are zero), plus an optional listing

Source format:
  label:              label = current address (column 0)
  name=value          symbol definition (column 0)
      LDA product     instruction (must be indented)
      .org 12         move the location counter
      .byte 1         emit one raw byte
  ; comment           anywhere on a line

Instructions (case-insensitive):
  NOP OUT HLT                        no operand
  LDA ADD SUB STA LDI JMP JC JZ      one operand: number, label or symbol

Numbers: 15 (decimal), $0f (hex), %1111 (binary).
Instruction operands must fit in 4 bits; .org, .byte and symbol values
in 8 bits. Anything larger is an error, never wrapped.

How the two-pass algorithm works:
  Pass 1: Walk all lines tracking the location counter; labels get the
          current address, symbols get their value.
  Pass 2: Emit bytes. Every label is known now, so forward references
          resolve. Writing past address 15 or writing the same cell
          twice (overlapping .org blocks) is an error.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import logging

from bb8_emulator.constants import MEMORY_SIZE, NIBBLE_MASK
from bb8_emulator.cpu.opcodes import Opcode, NO_OPERAND, mnemonic

__all__ = ['Assembler', 'AssemblerError', 'assemble', 'disassemble']

log = logging.getLogger(__name__)


class AssemblerError(Exception):
    """Raised on assembly errors."""
    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


# ──────────────────────────────────────────────
# Directives and reserved characters
# ──────────────────────────────────────────────

ORG = '.ORG'
BYTE = '.BYTE'
DIRECTIVES = (ORG, BYTE)

OPERAND_BITS = 4
DATA_BITS = 8

# Characters that can't appear in label / symbol names.
RESERVED_CHARS = set('$%#.;=: ')


# ──────────────────────────────────────────────
# Line Parser
# ──────────────────────────────────────────────

@dataclass
class AsmLine:
    """Parsed assembly source line."""
    label: Optional[str] = None
    symbol: Optional[str] = None
    mnemonic: Optional[str] = None
    operands: List[str] = field(default_factory=list)
    comment: Optional[str] = None
    line_num: int = 0
    raw: str = ""


def _check_name(name: str, kind: str, line_num: int, raw: str):
    if not name:
        raise AssemblerError(f"empty {kind} name", line_num, raw)
    for ch in name:
        if not ch.isprintable() or ch.isspace() or ch in RESERVED_CHARS:
            raise AssemblerError(f"illegal character {ch!r} in {kind} '{name}'", line_num, raw)


def _parse_line(line: str, line_num: int) -> AsmLine:
    """Parse one line of assembly into label/symbol, mnemonic, operands, comment."""
    result = AsmLine(line_num=line_num, raw=line)

    # Strip comment
    text, semi, comment = line.partition(';')
    if semi:
        result.comment = comment.strip()

    text = text.rstrip()
    if not text.strip():
        return result

    # Column 0: symbol definition or label
    if not text[0].isspace():
        head = text.strip()
        if '=' in head:
            if head.count('=') != 1:
                raise AssemblerError("more than one '=' in symbol definition", line_num, line)
            name, _, value = head.partition('=')
            name, value = name.strip(), value.strip()
            _check_name(name, 'symbol', line_num, line)
            if not value:
                raise AssemblerError(f"symbol '{name}' has no value", line_num, line)
            result.symbol = name
            result.operands = [value]
            return result
        if ':' in head:
            name, _, rest = head.partition(':')
            if ':' in rest:
                raise AssemblerError("more than one ':' in label", line_num, line)
            name = name.strip()
            _check_name(name, 'label', line_num, line)
            result.label = name
            text = rest
            if not text.strip():
                return result
        else:
            raise AssemblerError(
                "text in column 0 must be 'symbol=value' or 'label:' "
                "(leading whitespace missing?)", line_num, line)

    parts = text.split()
    result.mnemonic = parts[0].upper()
    result.operands = parts[1:]
    return result


# ──────────────────────────────────────────────
# Operand Analysis
# ──────────────────────────────────────────────

def _is_number(text: str) -> bool:
    return text[:1] in ('$', '%') or text[:1].isdigit()


def _parse_value(text: str, bits: int, line_num: int) -> int:
    """Parse a numeric literal and range-check it against `bits`.
    Supports: $0F (hex), %1111 (binary), 15 (decimal)
    """
    try:
        if text.startswith('$'):
            value = int(text[1:], 16)
        elif text.startswith('%'):
            value = int(text[1:], 2)
        elif text.isdigit():
            value = int(text)
        else:
            raise ValueError(text)
    except ValueError:
        raise AssemblerError(f"invalid number '{text}'", line_num) from None

    limit = (1 << bits) - 1
    if value > limit:
        raise AssemblerError(f"value {text} out of range (0-{limit})", line_num)
    return value


# ──────────────────────────────────────────────
# The Assembler
# ──────────────────────────────────────────────

class Assembler:
    """Two-pass BB8 assembler.

    Usage:
        asm = Assembler()
        image = asm.assemble(source_text)
        print(asm.get_listing())
    """

    def __init__(self):
        self.symbols: Dict[str, int] = {}     # labels and symbols: name -> value
        self.pc: int = 0                       # location counter
        self.image: bytearray = bytearray(MEMORY_SIZE)
        self.errors: List[str] = []
        self._lines: List[AsmLine] = []
        self._used: List[bool] = [False] * MEMORY_SIZE
        self._emitted: List[Tuple[AsmLine, int, int]] = []   # (line, addr, byte)

    def assemble(self, source: str) -> bytes:
        """Assemble source text into a 16-byte image.

        Errors are collected line by line and raised together at the end
        of the pass they were found in.
        """
        self.symbols = {}
        self.errors = []
        self._lines = []

        for i, line in enumerate(source.splitlines(), 1):
            try:
                self._lines.append(_parse_line(line, i))
            except AssemblerError as e:
                self.errors.append(str(e))

        if self.errors:
            raise AssemblerError("Parse errors:\n" + "\n".join(self.errors))

        self._pass1()
        if self.errors:
            raise AssemblerError("Pass 1 errors:\n" + "\n".join(self.errors))

        self._pass2()
        if self.errors:
            raise AssemblerError("Pass 2 errors:\n" + "\n".join(self.errors))

        log.debug("Assembled %d bytes, %d symbols", sum(self._used), len(self.symbols))
        return bytes(self.image)

    def _define(self, name: str, value: int, line: AsmLine):
        if name in self.symbols:
            raise AssemblerError(f"duplicate label or symbol: {name}", line.line_num, line.raw)
        self.symbols[name] = value

    def _pass1(self):
        """Pass 1: assign every label and symbol its value."""
        self.pc = 0
        for line in self._lines:
            try:
                self._pass1_line(line)
            except AssemblerError as e:
                self.errors.append(str(e))

    def _pass1_line(self, line: AsmLine):
        if line.symbol:
            self._define(line.symbol, _parse_value(line.operands[0], DATA_BITS, line.line_num), line)
            return

        if line.label:
            self._define(line.label, self.pc, line)

        mnem = line.mnemonic
        if mnem is None:
            return

        if mnem.startswith('.'):
            if mnem not in DIRECTIVES:
                raise AssemblerError(f"unknown directive {line.mnemonic.lower()}", line.line_num, line.raw)
            if len(line.operands) != 1:
                raise AssemblerError(f"{mnem.lower()} takes exactly 1 parameter, got {len(line.operands)}",
                                     line.line_num, line.raw)
            value = _parse_value(line.operands[0], DATA_BITS, line.line_num)
            if mnem == ORG:
                self.pc = value
            else:
                self.pc += 1
            return

        op = self._opcode(line)
        if op in NO_OPERAND:
            if line.operands:
                raise AssemblerError(f"unexpected parameters after instruction {mnem}", line.line_num, line.raw)
        elif len(line.operands) != 1:
            raise AssemblerError(f"expecting 1 parameter after instruction {mnem}, got {len(line.operands)}",
                                 line.line_num, line.raw)
        else:
            operand = line.operands[0]
            if _is_number(operand):
                _parse_value(operand, OPERAND_BITS, line.line_num)
            else:
                _check_name(operand, 'operand', line.line_num, line.raw)
        self.pc += 1

    def _opcode(self, line: AsmLine) -> Opcode:
        try:
            return Opcode[line.mnemonic]
        except KeyError:
            raise AssemblerError(f"unknown instruction {line.mnemonic}", line.line_num, line.raw) from None

    def _pass2(self):
        """Pass 2: emit the image using the complete symbol table."""
        self.pc = 0
        self.image = bytearray(MEMORY_SIZE)
        self._used = [False] * MEMORY_SIZE
        self._emitted = []
        for line in self._lines:
            try:
                self._pass2_line(line)
            except AssemblerError as e:
                self.errors.append(str(e))

    def _pass2_line(self, line: AsmLine):
        mnem = line.mnemonic
        if mnem is None:
            return

        if mnem == ORG:
            self.pc = _parse_value(line.operands[0], DATA_BITS, line.line_num)
            return
        if mnem == BYTE:
            self._emit(line, _parse_value(line.operands[0], DATA_BITS, line.line_num))
            return

        op = Opcode[mnem]
        if op in NO_OPERAND:
            self._emit(line, op << 4)
            return

        operand = line.operands[0]
        if _is_number(operand):
            value = _parse_value(operand, OPERAND_BITS, line.line_num)
        else:
            if operand not in self.symbols:
                raise AssemblerError(f"unknown symbol: {operand}", line.line_num, line.raw)
            value = self.symbols[operand]
            if value > NIBBLE_MASK:
                raise AssemblerError(
                    f"symbol {operand} holds value {value}, greater than 15, "
                    f"while used as parameter to {mnem}", line.line_num, line.raw)
        self._emit(line, (op << 4) | value)

    def _emit(self, line: AsmLine, byte: int):
        """Write one byte at the location counter and advance."""
        if self.pc >= MEMORY_SIZE:
            raise AssemblerError(f"program exceeds memory size of {MEMORY_SIZE} bytes",
                                 line.line_num, line.raw)
        if self._used[self.pc]:
            raise AssemblerError(f"address conflict at address {self.pc}, check .org directives",
                                 line.line_num, line.raw)
        self._used[self.pc] = True
        self.image[self.pc] = byte
        self._emitted.append((line, self.pc, byte))
        self.pc += 1

    def get_listing(self) -> str:
        """Return a human-readable listing showing address, byte, and source."""
        lines = [f"{'ADDR':>4}  {'BYTE':<4}  SOURCE", "-" * 40]
        emitted = {id(line): (addr, byte) for line, addr, byte in self._emitted}
        for asmline in self._lines:
            raw = asmline.raw.rstrip()
            if id(asmline) in emitted:
                addr, byte = emitted[id(asmline)]
                lines.append(f"  ${addr:X}  ${byte:02X}   {raw}")
            elif raw:
                lines.append(f"{'':12}{raw}")
        return '\n'.join(lines)


# ──────────────────────────────────────────────
# Convenience functions
# ──────────────────────────────────────────────

def assemble(source: str) -> bytes:
    """Assemble source text, return the 16-byte image."""
    return Assembler().assemble(source)


def disassemble(image: bytes) -> str:
    """Render an image as one 'addr  byte  mnemonic' line per cell."""
    return '\n'.join(f"${addr:X}  ${byte:02X}  {mnemonic(byte)}"
                     for addr, byte in enumerate(image))
