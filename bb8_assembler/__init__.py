"""
BB8 Assembler
=============
Turns BB8 assembly source into the 16-byte program image that the
emulator's RAM board loads.

    ┌────────────┐    ┌──────────┐    ┌──────────┐    ┌───────────────┐
    │ asm source │───>│ parse    │───>│ pass 1   │───>│ pass 2        │
    │ (.asm)     │    │ (lines)  │    │ (labels) │    │ (16-byte img) │
    └────────────┘    └──────────┘    └──────────┘    └───────────────┘
"""

__version__ = "0.1.0"

from .assembler import Assembler, AssemblerError, assemble, disassemble

__all__ = ['Assembler', 'AssemblerError', 'assemble', 'disassemble', '__version__']
