"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chipcore.state import MachineState
from chipcore.decode import CLS, RET, Unrecognized
from chipcore.faults import Fault, MachineFault
from chipcore.stack import pop


def execute_unrecognized(state: MachineState, instruction: Unrecognized) -> MachineState:
    """Unknown words, 0NNN machine code calls included."""
    raise MachineFault(Fault.UNRECOGNIZED_OPCODE, f"unrecognized opcode 0x{instruction.word:04X}")


def execute_clear_screen(state: MachineState, instruction: CLS) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: MachineState, instruction: RET) -> MachineState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=jnp.asarray(address, dtype=jnp.uint16))
