"""CHIP-8 interpreter core."""

import jax

# Display rows are packed into uint64
jax.config.update("jax_enable_x64", True)

from chipcore.state import (
    MachineState, QuirksConfig, StackState, create_state,
    press_key, release_key, set_keys,
)
from chipcore.decode import Instruction, Unrecognized, decode, disassemble
from chipcore.emulator import execute, fetch, load_program, load_rom
from chipcore.stepper import Stepper, decay_timers
from chipcore.faults import ExecutionResult, Fault, MachineFault, StepResult
from chipcore.rng import JaxRandomSource, RandomSource, SequenceRandomSource
from chipcore.constants import *
from chipcore.rendering import chip8_display_to_rgb, create_color_scheme, display_to_array

__all__ = [
    "MachineState",
    "QuirksConfig",
    "StackState",
    "create_state",
    "press_key",
    "release_key",
    "set_keys",
    "Instruction",
    "Unrecognized",
    "decode",
    "disassemble",
    "execute",
    "fetch",
    "load_program",
    "load_rom",
    "Stepper",
    "decay_timers",
    "ExecutionResult",
    "Fault",
    "MachineFault",
    "StepResult",
    "JaxRandomSource",
    "RandomSource",
    "SequenceRandomSource",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "display_to_array",
]
