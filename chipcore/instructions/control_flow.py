"""CHIP-8 control flow instructions."""

import jax.numpy as jnp
from chipcore.state import MachineState, get_register
from chipcore.decode import JP, CALL, JPV
from chipcore.stack import push


def _jump_to(state: MachineState, address: int) -> MachineState:
    return state.replace(pc=jnp.asarray(address & 0xFFFF, dtype=jnp.uint16))


def execute_jump(state: MachineState, instruction: JP) -> MachineState:
    """1NNN - Jump to address NNN."""
    return _jump_to(state, instruction.addr)


def execute_call(state: MachineState, instruction: CALL) -> MachineState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, int(state.pc)))
    return execute_jump(state, instruction)


def execute_jump_with_offset(state: MachineState, instruction: JPV) -> MachineState:
    """BNNN - Jump to address NNN + V0."""
    return _jump_to(state, instruction.addr + get_register(state, 0))


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: MachineState, instruction) -> MachineState:
        if condition_fn(state, instruction):
            return _jump_to(state, int(state.pc) + 2)
        return state
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: get_register(state, inst.x) == inst.kk & 0xFF
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: get_register(state, inst.x) != inst.kk & 0xFF
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: get_register(state, inst.x) == get_register(state, inst.y)
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: get_register(state, inst.x) != get_register(state, inst.y)
)


def is_key_pressed(state: MachineState, register: int) -> bool:
    """Whether the key named by the low nibble of VX is down."""
    return bool(state.keypad[get_register(state, register) & 0xF])


execute_skip_if_key = make_skip_instruction(
    lambda state, inst: is_key_pressed(state, inst.x)
)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: not is_key_pressed(state, inst.x)
)
