"""Fetch/decode/execute cycle with wall-clock driven timers."""

import time
from typing import Callable, Optional

import jax.numpy as jnp
from chipcore.state import MachineState
from chipcore.decode import decode
from chipcore.emulator import execute, fetch
from chipcore.constants import TIMER_HZ, MAX_TIMER_TICKS_PER_STEP
from chipcore.faults import MachineFault, StepResult


def decay_timers(state: MachineState, ticks: int) -> MachineState:
    """Count both timers down by ``ticks``, stopping at zero."""
    if ticks <= 0:
        return state
    return state.replace(
        delay_timer=jnp.asarray(max(int(state.delay_timer) - ticks, 0), dtype=jnp.uint8),
        sound_timer=jnp.asarray(max(int(state.sound_timer) - ticks, 0), dtype=jnp.uint8),
    )


class Stepper:
    """Runs one machine cycle per ``step`` call.

    Timers are decremented at 60 Hz of elapsed ``clock`` time. Fractions of a
    tick carry over to the next step; if more than ``max_ticks_per_step``
    ticks have piled up (the driver stalled) only that many are applied and
    the backlog is dropped.

    The program counter advances once, at fetch. Jumps, calls and returns
    overwrite it and taken skips add two more bytes.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_ticks_per_step: int = MAX_TIMER_TICKS_PER_STEP,
        timer_hz: float = TIMER_HZ,
    ):
        if max_ticks_per_step < 1:
            raise ValueError("max_ticks_per_step must be at least 1")
        self.clock = clock
        self.max_ticks_per_step = max_ticks_per_step
        self.timer_hz = timer_hz
        self.last_timer_update: Optional[float] = None

    def reset_clock(self) -> None:
        """Forget the last timer sample, e.g. after the driver paused."""
        self.last_timer_update = None

    def elapsed_ticks(self) -> int:
        """Whole timer ticks since the last update, consuming them."""
        now = self.clock()
        if self.last_timer_update is None:
            self.last_timer_update = now
            return 0

        ticks = int((now - self.last_timer_update) * self.timer_hz)
        if ticks <= 0:
            return 0
        if ticks > self.max_ticks_per_step:
            self.last_timer_update = now
            return self.max_ticks_per_step
        self.last_timer_update += ticks / self.timer_hz
        return ticks

    def step(self, state: MachineState) -> StepResult:
        """Decay timers then fetch, decode and execute one instruction."""
        state = decay_timers(state, self.elapsed_ticks())
        address = int(state.pc)

        try:
            fetched, word = fetch(state)
        except MachineFault as error:
            return StepResult(state, address=address, fault=error.fault)

        instruction = decode(word)
        result = execute(fetched, instruction)

        if result.awaiting_key:
            return StepResult(state, instruction, address, awaiting_key=True)
        if result.fault is not None:
            return StepResult(fetched, instruction, address, fault=result.fault)
        return StepResult(result.state, instruction, address)
