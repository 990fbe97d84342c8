"""Main CHIP-8 execution engine."""

from typing import Union

import jax.numpy as jnp
from chipcore.state import MachineState, write_memory
from chipcore.constants import PROGRAM_START, MAX_PROGRAM_SIZE, MEMORY_SIZE
from chipcore.faults import ExecutionResult, Fault, MachineFault
from chipcore.decode import (
    Instruction, Unrecognized, decode, CLS, RET, JP, CALL, SEB, SNEB, SEV, LDB, ADDB,
    LDV, OR, AND, XOR, ADDC, SUB, SHR, SUBN, SHL, SNEV, LDI, JPV, RND, DRW, SKP,
    SKNP, LDVD, LDK, LDDV, LDSV, ADDI, LDIS, LDD, LDMV, LDVM,
)
from chipcore.instructions.system import execute_unrecognized, execute_clear_screen, execute_return
from chipcore.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key,
)
from chipcore.instructions.alu import execute_alu_operation, execute_shift
from chipcore.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipcore.instructions.display import execute_display
from chipcore.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)

HANDLERS = {
    CLS: execute_clear_screen,
    RET: execute_return,
    JP: execute_jump,
    CALL: execute_call,
    SEB: execute_skip_if_equal_immediate,
    SNEB: execute_skip_if_not_equal_immediate,
    SEV: execute_skip_if_equal_register,
    LDB: execute_set,
    ADDB: execute_add,
    LDV: execute_alu_operation,
    OR: execute_alu_operation,
    AND: execute_alu_operation,
    XOR: execute_alu_operation,
    ADDC: execute_alu_operation,
    SUB: execute_alu_operation,
    SHR: execute_shift,
    SUBN: execute_alu_operation,
    SHL: execute_shift,
    SNEV: execute_skip_if_not_equal_register,
    LDI: execute_set_index,
    JPV: execute_jump_with_offset,
    RND: execute_random,
    DRW: execute_display,
    SKP: execute_skip_if_key,
    SKNP: execute_skip_if_not_key,
    LDVD: execute_get_delay_timer,
    LDK: execute_wait_for_key,
    LDDV: execute_set_delay_timer,
    LDSV: execute_set_sound_timer,
    ADDI: execute_add_to_index,
    LDIS: execute_font_character,
    LDD: execute_bcd_conversion,
    LDMV: execute_store_registers,
    LDVM: execute_load_registers,
    Unrecognized: execute_unrecognized,
}


def execute(state: MachineState, instruction: Union[Instruction, int]) -> ExecutionResult:
    """Execute single CHIP-8 instruction.

    ``state.pc`` is expected to already point past the instruction. Faults
    leave the given state untouched and are reported in the result.
    """
    if not isinstance(instruction, tuple(HANDLERS)):
        instruction = decode(instruction)

    try:
        outcome = HANDLERS[type(instruction)](state, instruction)
    except MachineFault as error:
        return ExecutionResult(state, fault=error.fault)

    if isinstance(outcome, ExecutionResult):
        return outcome
    return ExecutionResult(outcome)


def _pack_u16(high: int, low: int) -> int:
    """Pack two bytes into uint16."""
    return (high << 8) | low


def fetch(state: MachineState) -> tuple[MachineState, int]:
    """Fetch next instruction from memory and advance past it."""
    pc = int(state.pc)
    if pc + 1 >= MEMORY_SIZE:
        raise MachineFault(Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS, f"cannot fetch two bytes at 0x{pc:04X}")
    instruction = _pack_u16(int(state.memory[pc]), int(state.memory[pc + 1]))
    return state.replace(pc=jnp.asarray(pc + 2, dtype=jnp.uint16)), instruction


def load_program(state: MachineState, data: bytes) -> MachineState:
    """Copy a program image into memory starting at 0x200."""
    data = bytes(data)
    if len(data) > MAX_PROGRAM_SIZE:
        raise ValueError(f"Program is {len(data)} bytes, at most {MAX_PROGRAM_SIZE} fit in memory")
    return write_memory(state, PROGRAM_START, data)


def load_rom(state: MachineState, filename: str) -> MachineState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
