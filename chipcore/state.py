"""CHIP-8 machine state structures."""

from typing import Iterable, Optional

import jax.numpy as jnp
import numpy as np
from flax.struct import dataclass, PyTreeNode, field

from chipcore.constants import (
    PROGRAM_START, MAX_PROGRAM_SIZE, MEMORY_SIZE, FONT_START, FONT_DATA,
    SCREEN_HEIGHT, STACK_SIZE, NUM_REGISTERS, NUM_KEYS, FLAG_REGISTER,
)
from chipcore.faults import Fault, MachineFault
from chipcore.rng import JaxRandomSource, RandomSource


@dataclass(frozen=True)
class QuirksConfig:
    """Behavioural variants of the historical CHIP-8 interpreters.

    Attributes:
        wrap_sprite: Draw sprites from the raw VX/VY values, letting columns
            past the right edge fall off the 64-bit row. When False the origin
            is taken modulo the screen size and the sprite is clipped.
        high_precision_shift: 8XY6/8XYE shift VX in place. When False they
            shift VY and store the result in VX (COSMAC VIP behaviour).
        auto_increment_index: FX55/FX65 leave I pointing past the last
            register transferred (COSMAC VIP behaviour).
    """
    wrap_sprite: bool = False
    high_precision_shift: bool = True
    auto_increment_index: bool = False

    @classmethod
    def modern(cls) -> "QuirksConfig":
        return cls()

    @classmethod
    def legacy(cls) -> "QuirksConfig":
        return cls(wrap_sprite=False, high_precision_shift=False, auto_increment_index=True)


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls.

    ``pointer`` counts occupied slots, so it ranges over 0..STACK_SIZE.
    """
    data: jnp.ndarray
    pointer: int = 0


class MachineState(PyTreeNode):
    """Main CHIP-8 machine state."""
    V: jnp.ndarray
    I: jnp.ndarray
    pc: jnp.ndarray
    stack: StackState
    memory: jnp.ndarray
    display: jnp.ndarray
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    rng: RandomSource
    quirks: QuirksConfig = field(pytree_node=False, default=QuirksConfig())


def create_state(
    program: bytes = b"",
    interpreter: Optional[bytes] = None,
    quirks: Optional[QuirksConfig] = None,
    rng: Optional[RandomSource] = None,
) -> MachineState:
    """Create initial machine state.

    Args:
        program: Program image, copied verbatim to 0x200.
        interpreter: Bytes for 0x000-0x1FF. The built-in font is placed at
            FONT_START when omitted.
        quirks: Behavioural variant, modern by default.
        rng: Randomness source for CXNN, a seeded JAX PRNG by default.
    """
    program = bytes(program)
    if len(program) > MAX_PROGRAM_SIZE:
        raise ValueError(f"Program is {len(program)} bytes, at most {MAX_PROGRAM_SIZE} fit in memory")

    memory = np.zeros(MEMORY_SIZE, dtype=np.uint8)
    if interpreter is None:
        memory[FONT_START:FONT_START + len(FONT_DATA)] = FONT_DATA
    else:
        interpreter = bytes(interpreter)
        if len(interpreter) > PROGRAM_START:
            raise ValueError(f"Interpreter image is {len(interpreter)} bytes, at most {PROGRAM_START} are reserved")
        memory[:len(interpreter)] = np.frombuffer(interpreter, dtype=np.uint8)
    memory[PROGRAM_START:PROGRAM_START + len(program)] = np.frombuffer(program, dtype=np.uint8)

    return MachineState(
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        stack=StackState(data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16)),
        memory=jnp.asarray(memory),
        display=jnp.zeros(SCREEN_HEIGHT, dtype=jnp.uint64),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        rng=JaxRandomSource.from_seed(0) if rng is None else rng,
        quirks=QuirksConfig() if quirks is None else quirks,
    )


def register_index(index) -> int:
    """Clamp a register number to V0..VF."""
    return min(max(int(index), 0), NUM_REGISTERS - 1)


def get_register(state: MachineState, index) -> int:
    return int(state.V[register_index(index)])


def set_register(state: MachineState, index, value: int) -> MachineState:
    return state.replace(V=state.V.at[register_index(index)].set(int(value) & 0xFF))


def set_register_with_flag(state: MachineState, index, value: int, flag: int) -> MachineState:
    """Write VX then VF, so VF as destination ends up holding the flag."""
    V = state.V.at[register_index(index)].set(int(value) & 0xFF)
    return state.replace(V=V.at[FLAG_REGISTER].set(int(flag) & 1))


def check_memory_range(start: int, length: int) -> None:
    """Raise MachineFault unless [start, start + length) lies in memory."""
    if start < 0 or length < 0 or start + length > MEMORY_SIZE:
        raise MachineFault(
            Fault.MEMORY_RANGE_OUT_OF_BOUNDS,
            f"range 0x{start:03X}+{length} exceeds {MEMORY_SIZE} bytes of memory",
        )


def read_memory(state: MachineState, start: int, length: int) -> list:
    check_memory_range(start, length)
    return np.asarray(state.memory[start:start + length]).tolist()


def write_memory(state: MachineState, start: int, values) -> MachineState:
    values = [int(v) & 0xFF for v in values]
    check_memory_range(start, len(values))
    if not values:
        return state
    block = jnp.asarray(values, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[start:start + len(values)].set(block))


def _check_key(key: int) -> int:
    key = int(key)
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key must be in 0..{NUM_KEYS - 1}, got {key}")
    return key


def press_key(state: MachineState, key: int) -> MachineState:
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(True))


def release_key(state: MachineState, key: int) -> MachineState:
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(False))


def set_keys(state: MachineState, keys: Iterable[int]) -> MachineState:
    """Replace the whole keypad with exactly ``keys`` held down."""
    keypad = np.zeros(NUM_KEYS, dtype=np.bool_)
    for key in keys:
        keypad[_check_key(key)] = True
    return state.replace(keypad=jnp.asarray(keypad))
