"""CHIP-8 memory and register operations."""

import jax.numpy as jnp
from chipcore.state import MachineState, get_register, set_register
from chipcore.decode import LDB, ADDB, LDI, RND


def execute_set(state: MachineState, instruction: LDB) -> MachineState:
    """6XKK - Set VX = KK."""
    return set_register(state, instruction.x, instruction.kk)


def execute_add(state: MachineState, instruction: ADDB) -> MachineState:
    """7XKK - Add KK to VX, wrapping, VF untouched."""
    return set_register(state, instruction.x, get_register(state, instruction.x) + instruction.kk)


def execute_set_index(state: MachineState, instruction: LDI) -> MachineState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.asarray(instruction.addr & 0xFFFF, dtype=jnp.uint16))


def execute_random(state: MachineState, instruction: RND) -> MachineState:
    """CXKK - Set VX = random & KK."""
    random_value, rng = state.rng.next_byte()
    state = state.replace(rng=rng)
    return set_register(state, instruction.x, random_value & instruction.kk)
