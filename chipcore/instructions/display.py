"""CHIP-8 display operations."""

import jax.numpy as jnp
import numpy as np
from chipcore.state import MachineState, get_register, set_register, read_memory
from chipcore.decode import DRW
from chipcore.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, ROW_MASK, FLAG_REGISTER


def sprite_row_bits(sprite_byte: int, column: int) -> int:
    """Align a sprite byte so its MSB lands on ``column`` of a packed row.

    Pixels right of column 63 are shifted out of the row.
    """
    shift = SCREEN_WIDTH - SPRITE_WIDTH - column
    if shift >= 0:
        return (sprite_byte << shift) & ROW_MASK
    return sprite_byte >> -shift


def execute_display(state: MachineState, instruction: DRW) -> MachineState:
    """DXYN - Draw sprite at (VX, VY) with height N."""
    height = instruction.n & 0xF
    if height == 0:
        return state
    sprite = read_memory(state, int(state.I), height)

    sprite_x = get_register(state, instruction.x)
    sprite_y = get_register(state, instruction.y)
    if not state.quirks.wrap_sprite:
        sprite_x %= SCREEN_WIDTH
        sprite_y %= SCREEN_HEIGHT

    rows = np.asarray(state.display).tolist()
    collision = False
    for offset, sprite_byte in enumerate(sprite):
        row = sprite_y + offset
        if row >= SCREEN_HEIGHT:
            break
        bits = sprite_row_bits(sprite_byte, sprite_x)
        collision = collision or bool(rows[row] & bits)
        rows[row] ^= bits

    state = state.replace(display=jnp.asarray(np.array(rows, dtype=np.uint64)))
    return set_register(state, FLAG_REGISTER, int(collision))
