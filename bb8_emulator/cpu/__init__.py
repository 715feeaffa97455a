# Boards that make up the CPU: clock, registers, ALU, program counter,
# opcode table and the control-logic micro-sequencer.
