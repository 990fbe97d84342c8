"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chipcore.constants import STACK_SIZE
from chipcore.faults import Fault, MachineFault
from chipcore.state import StackState


def push(stack: StackState, address: int) -> StackState:
    """Push address onto stack."""
    if stack.pointer >= STACK_SIZE:
        raise MachineFault(Fault.STACK_OVERFLOW, f"stack already holds {STACK_SIZE} return addresses")
    new_data = stack.data.at[stack.pointer].set(jnp.asarray(int(address) & 0xFFFF, dtype=jnp.uint16))
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, int]:
    """Pop address from stack."""
    if stack.pointer <= 0:
        raise MachineFault(Fault.STACK_UNDERFLOW, "return with an empty stack")
    new_pointer = stack.pointer - 1
    popped_address = int(stack.data[new_pointer])
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
