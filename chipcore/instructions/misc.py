"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
import numpy as np
from chipcore.state import (
    MachineState, get_register, set_register, register_index,
    read_memory, write_memory,
)
from chipcore.decode import LDVD, LDK, LDDV, LDSV, ADDI, LDIS, LDD, LDMV, LDVM
from chipcore.constants import FONT_START, FONT_GLYPH_SIZE
from chipcore.faults import ExecutionResult


def execute_get_delay_timer(state: MachineState, instruction: LDVD) -> MachineState:
    """FX07 - Set VX to delay timer value."""
    return set_register(state, instruction.x, int(state.delay_timer))


def execute_set_delay_timer(state: MachineState, instruction: LDDV) -> MachineState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=jnp.asarray(get_register(state, instruction.x), dtype=jnp.uint8))


def execute_set_sound_timer(state: MachineState, instruction: LDSV) -> MachineState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=jnp.asarray(get_register(state, instruction.x), dtype=jnp.uint8))


def execute_add_to_index(state: MachineState, instruction: ADDI) -> MachineState:
    """FX1E - Add VX to I register."""
    new_i = (int(state.I) + get_register(state, instruction.x)) & 0xFFFF
    return state.replace(I=jnp.asarray(new_i, dtype=jnp.uint16))


def execute_wait_for_key(state: MachineState, instruction: LDK):
    """FX0A - Wait for key press.

    With no key down the state is returned unchanged and flagged as waiting;
    the caller is expected to update the keypad and run the instruction again.
    """
    pressed = np.flatnonzero(np.asarray(state.keypad))
    if pressed.size == 0:
        return ExecutionResult(state, awaiting_key=True)
    return set_register(state, instruction.x, int(pressed[0]))


def execute_font_character(state: MachineState, instruction: LDIS) -> MachineState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = get_register(state, instruction.x) & 0xF
    font_address = FONT_START + digit * FONT_GLYPH_SIZE
    return state.replace(I=jnp.asarray(font_address, dtype=jnp.uint16))


def execute_bcd_conversion(state: MachineState, instruction: LDD) -> MachineState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = get_register(state, instruction.x)
    digits = [value // 100, (value // 10) % 10, value % 10]
    return write_memory(state, int(state.I), digits)


def _advance_index(state: MachineState, count: int) -> MachineState:
    if not state.quirks.auto_increment_index:
        return state
    return state.replace(I=jnp.asarray((int(state.I) + count) & 0xFFFF, dtype=jnp.uint16))


def execute_store_registers(state: MachineState, instruction: LDMV) -> MachineState:
    """FX55 - Store V0 through VX in memory starting at I."""
    count = register_index(instruction.x) + 1
    values = np.asarray(state.V[:count]).tolist()
    state = write_memory(state, int(state.I), values)
    return _advance_index(state, count)


def execute_load_registers(state: MachineState, instruction: LDVM) -> MachineState:
    """FX65 - Load V0 through VX from memory starting at I."""
    count = register_index(instruction.x) + 1
    values = read_memory(state, int(state.I), count)
    state = state.replace(V=state.V.at[:count].set(jnp.asarray(values, dtype=jnp.uint8)))
    return _advance_index(state, count)
