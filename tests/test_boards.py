"""
Board-level tests for the BB8 emulator.

Each board is driven directly with a clock level and a control vector,
without the orchestrator, to pin down edge behaviour:
  - registers capture on rising edges only, CLR wins, outputs drive every tick
  - IR drives only its low nibble, MAR keeps only the low nibble
  - clock toggles and is held low by HLT
  - ALU flags commit on FI before the adder recomputes
  - program counter wraps, jump loads the low nibble
  - RAM load truncation, partial loads, edge-triggered writes
"""
import logging
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from bb8_emulator.bus import Bus
from bb8_emulator.signals import ControlSignals, IDLE
from bb8_emulator.cpu.clock import Clock
from bb8_emulator.cpu.regs import Register, InstructionRegister, AddressRegister
from bb8_emulator.cpu.alu import ArithmeticUnit, add8, sub8
from bb8_emulator.cpu.counter import ProgramCounter
from bb8_emulator.mem.memory import Memory


@pytest.fixture
def bus():
    return Bus()


# ─── Bus ──────────────────────────────────

class TestBus:
    def test_drive_masks_to_8_bits(self, bus):
        bus.drive(0x1FF, 'A')
        assert bus.value == 0xFF
        assert bus.driver == 'A'

    def test_value_persists(self, bus):
        bus.drive(0x42)
        assert bus.read() == 0x42
        assert bus.read() == 0x42

    def test_clear(self, bus):
        bus.drive(0x42, 'IR')
        bus.clear()
        assert bus.value == 0
        assert bus.driver is None


# ─── Control vector ───────────────────────

class TestControlSignals:
    def test_idle_has_no_lines(self):
        assert IDLE.active() == []
        assert IDLE.display() == 'none'

    def test_active_labels(self):
        sig = ControlSignals(pc_out=True, mar_in=True)
        assert sig.active() == ['MI', 'CO']


# ─── Registers ────────────────────────────

class TestRegister:
    def test_captures_on_rising_edge(self, bus):
        a = Register('A', bus, enable_in='a_in', enable_out='a_out')
        bus.drive(0x42)
        a.tick(True, ControlSignals(a_in=True))
        assert a.value == 0x42

    def test_ignores_level_and_falling_edge(self, bus):
        a = Register('A', bus, enable_in='a_in')
        bus.drive(0x42)
        a.tick(False, ControlSignals(a_in=True))
        assert a.value == 0
        a.tick(True, IDLE)              # rising edge, no AI
        a.tick(True, ControlSignals(a_in=True))   # still high: no edge
        assert a.value == 0
        a.tick(False, ControlSignals(a_in=True))  # falling edge
        assert a.value == 0

    def test_clear_beats_capture(self, bus):
        a = Register('A', bus, enable_in='a_in')
        bus.drive(0x42)
        a.tick(True, ControlSignals(a_in=True, clear=True))
        assert a.value == 0

    def test_clear_is_level_sensitive(self, bus):
        a = Register('A', bus, enable_in='a_in')
        a.value = 0x55
        a.tick(False, ControlSignals(clear=True))
        assert a.value == 0

    def test_drives_every_tick_while_enabled(self, bus):
        a = Register('A', bus, enable_in='a_in', enable_out='a_out')
        a.value = 0x07
        for clk in (False, True, False):
            bus.drive(0)
            a.tick(clk, ControlSignals(a_out=True))
            assert bus.value == 0x07
            assert bus.driver == 'A'

    def test_input_only_register_never_drives(self, bus):
        b = Register('B', bus, enable_in='b_in')
        b.value = 0x33
        bus.drive(0x11)
        b.tick(True, ControlSignals(a_out=True))
        assert bus.value == 0x11


class TestInstructionRegister:
    def test_drives_low_nibble_only(self, bus):
        ir = InstructionRegister(bus)
        ir.value = 0x2E
        ir.tick(False, ControlSignals(ir_out=True))
        assert bus.value == 0x0E

    def test_opcode_and_operand(self, bus):
        ir = InstructionRegister(bus)
        bus.drive(0x73)
        ir.tick(True, ControlSignals(ir_in=True))
        assert ir.value == 0x73
        assert ir.opcode == 0x7
        assert ir.operand == 0x3


class TestAddressRegister:
    def test_keeps_low_nibble(self, bus):
        mar = AddressRegister(bus)
        bus.drive(0xAB)
        mar.tick(True, ControlSignals(mar_in=True))
        assert mar.value == 0x0B

    def test_does_not_drive(self, bus):
        mar = AddressRegister(bus)
        mar.value = 0x0C
        bus.drive(0x99)
        mar.tick(False, ControlSignals(mar_in=True))
        assert bus.value == 0x99


# ─── Clock ────────────────────────────────

class TestClock:
    def test_toggles(self):
        clk = Clock()
        assert [clk.tick(False) for _ in range(4)] == [True, False, True, False]

    def test_halt_forces_low(self):
        clk = Clock()
        clk.tick(False)
        assert clk.level is True
        assert clk.tick(True) is False
        assert clk.tick(True) is False


# ─── ALU + flags ──────────────────────────

class TestAdderFunctions:
    def test_add(self):
        assert add8(2, 3) == (5, False, False)
        assert add8(200, 100) == (44, True, False)
        assert add8(255, 1) == (0, True, True)

    def test_sub_carry_is_borrow(self):
        assert sub8(5, 3) == (2, False, False)
        assert sub8(3, 5) == (254, True, False)
        assert sub8(5, 5) == (0, False, True)


class TestArithmeticUnit:
    def _alu(self, bus, a_val, b_val):
        a = Register('A', bus, enable_in='a_in', enable_out='a_out')
        b = Register('B', bus, enable_in='b_in')
        a.value, b.value = a_val, b_val
        return ArithmeticUnit(bus, a, b)

    def test_recomputes_every_tick(self, bus):
        alu = self._alu(bus, 2, 3)
        alu.tick(False, IDLE)
        assert alu.value == 5
        alu.a.value = 10
        alu.tick(True, IDLE)
        assert alu.value == 13

    def test_flags_only_commit_on_fi(self, bus):
        alu = self._alu(bus, 200, 100)
        alu.tick(False, IDLE)
        assert alu.pending_carry is True
        assert alu.carry is False
        alu.tick(True, IDLE)
        assert alu.carry is False

    def test_commit_uses_previous_calculation(self, bus):
        alu = self._alu(bus, 200, 100)
        alu.tick(False, IDLE)            # pending carry from 200 + 100
        alu.b.value = 0                  # next result would not carry
        alu.tick(True, ControlSignals(flags_in=True))
        assert alu.carry is True
        assert alu.zero is False
        assert alu.pending_carry is False

    def test_subtract_select(self, bus):
        alu = self._alu(bus, 3, 5)
        alu.tick(False, ControlSignals(subtract=True))
        assert alu.value == 254
        assert alu.pending_carry is True

    def test_clear_resets_committed_flags(self, bus):
        alu = self._alu(bus, 255, 1)
        alu.tick(False, IDLE)
        alu.tick(True, ControlSignals(flags_in=True))
        assert alu.carry and alu.zero
        alu.tick(False, ControlSignals(clear=True))
        assert not alu.carry and not alu.zero

    def test_drives_result(self, bus):
        alu = self._alu(bus, 20, 22)
        alu.tick(False, ControlSignals(alu_out=True))
        assert bus.value == 42
        assert bus.driver == 'ALU'


# ─── Program counter ──────────────────────

class TestProgramCounter:
    def test_increment_on_rising_edge(self, bus):
        pc = ProgramCounter(bus)
        pc.tick(False, ControlSignals(pc_enable=True))
        assert pc.value == 0
        pc.tick(True, ControlSignals(pc_enable=True))
        assert pc.value == 1

    def test_wraps_at_16(self, bus):
        pc = ProgramCounter(bus)
        pc.value = 15
        pc.tick(True, ControlSignals(pc_enable=True))
        assert pc.value == 0

    def test_jump_loads_low_nibble(self, bus):
        pc = ProgramCounter(bus)
        bus.drive(0xF3)
        pc.tick(True, ControlSignals(jump=True))
        assert pc.value == 3

    def test_jump_wins_over_increment(self, bus):
        # Never produced by the microcode; the tie-break is fixed anyway.
        pc = ProgramCounter(bus)
        pc.value = 7
        bus.drive(0x02)
        pc.tick(True, ControlSignals(jump=True, pc_enable=True))
        assert pc.value == 2

    def test_clear_and_drive(self, bus):
        pc = ProgramCounter(bus)
        pc.value = 9
        pc.tick(False, ControlSignals(pc_out=True))
        assert bus.value == 9
        pc.tick(True, ControlSignals(clear=True, pc_enable=True))
        assert pc.value == 0


# ─── RAM ──────────────────────────────────

class TestMemory:
    def _ram(self, bus):
        mar = AddressRegister(bus)
        return Memory(bus, mar), mar

    def test_load_exact_size(self, bus):
        ram, _ = self._ram(bus)
        assert ram.load(range(16)) is False
        assert ram.snapshot() == bytes(range(16))

    def test_load_truncates_and_warns(self, bus, caplog):
        ram, _ = self._ram(bus)
        with caplog.at_level(logging.WARNING, logger='bb8_emulator'):
            truncated = ram.load(bytes(range(20)))
        assert truncated is True
        assert ram.snapshot() == bytes(range(16))
        assert "20 bytes" in caplog.text

    def test_partial_load_keeps_trailing_cells(self, bus):
        ram, _ = self._ram(bus)
        ram.load([0xAA] * 16)
        assert ram.load([1, 2, 3, 4, 5]) is False
        assert ram.snapshot() == bytes([1, 2, 3, 4, 5] + [0xAA] * 11)

    def test_write_on_rising_edge(self, bus):
        ram, mar = self._ram(bus)
        mar.value = 3
        bus.drive(0x99)
        ram.tick(False, ControlSignals(ram_in=True))
        assert ram.snapshot()[3] == 0
        ram.tick(True, ControlSignals(ram_in=True))
        assert ram.snapshot()[3] == 0x99

    def test_drive_addressed_cell(self, bus):
        ram, mar = self._ram(bus)
        ram.load([0, 0, 0, 0, 0, 0x5A])
        mar.value = 5
        ram.tick(False, ControlSignals(ram_out=True))
        assert bus.value == 0x5A
        assert bus.driver == 'RAM'

    def test_clear_leaves_contents(self, bus):
        ram, _ = self._ram(bus)
        ram.load([7] * 16)
        ram.tick(True, ControlSignals(clear=True))
        assert ram.snapshot() == bytes([7] * 16)

    def test_hexdump(self, bus):
        ram, _ = self._ram(bus)
        ram.load(range(16))
        dump = ram.hexdump().splitlines()
        assert dump[0] == '0  00 01 02 03 04 05 06 07'
        assert dump[1] == '8  08 09 0A 0B 0C 0D 0E 0F'
