"""Console logging utilities for running the interpreter.

This module provides a small levelled console logger, a specialised logger
for execution traces and faults, and a headless run loop with a tqdm
progress bar.
"""

import sys
import time
from typing import Any, Dict, Optional, TextIO

from tqdm import tqdm

from chipcore.decode import disassemble
from chipcore.faults import StepResult
from chipcore.state import MachineState


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
_RESET = "\033[0m"


class ConsoleLogger:
    """Levelled console logger with elapsed-time stamps.

    Colours are only used when the stream is a terminal.
    """

    def __init__(
        self,
        name: str = "chipcore",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream: Optional[TextIO] = None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        if self.log_level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.stream = sys.stderr if stream is None else stream
        self.use_colors = use_colors and getattr(self.stream, "isatty", lambda: False)()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def _should_log(self, level: str) -> bool:
        return LEVELS.index(level) >= LEVELS.index(self.log_level)

    def _format_message(self, level: str, message: str) -> str:
        prefix = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        tag = f"[{level:>7s}]"
        if self.use_colors:
            tag = f"{_LEVEL_COLORS[level]}{tag}{_RESET}"
        return f"{prefix}{tag}[{self.name}] {message}"

    def log(self, level: str, message: str):
        if self._should_log(level):
            print(self._format_message(level, message), file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)


class ExecutionLogger(ConsoleLogger):
    """Logger for interpreter runs: configuration, traces, faults, totals."""

    def __init__(self, name: str = "chipcore", trace: bool = False, **kwargs):
        super().__init__(name, **kwargs)
        self.trace = trace
        self.steps = 0
        self.faults: Dict[str, int] = {}

    def log_run_start(self, config: Dict[str, Any]):
        """Log run configuration."""
        self.info("=" * 60)
        self.info("Starting interpreter with configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_step(self, result: StepResult):
        """Record one step; trace it at DEBUG and report faults at WARNING."""
        self.steps += 1
        if self.trace and result.instruction is not None:
            self.debug(f"0x{result.address:03X}: {disassemble(result.instruction)}")
        if result.fault is not None:
            self.faults[result.fault.name] = self.faults.get(result.fault.name, 0) + 1
            where = f" ({disassemble(result.instruction)})" if result.instruction is not None else ""
            self.warning(f"Fault at 0x{result.address:03X}{where}: {result.fault.value}")

    def log_run_end(self, state: MachineState):
        """Log totals and the final register file."""
        elapsed = time.time() - self.start_time
        self.info("=" * 60)
        self.info(f"Executed {self.steps} steps in {elapsed:.2f}s")
        for name, count in sorted(self.faults.items()):
            self.info(f"  {name}: {count}")
        registers = " ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(state.V))
        self.info(f"  PC=0x{int(state.pc):03X} I=0x{int(state.I):03X} {registers}")
        self.info("=" * 60)


def run_with_progress(
    stepper,
    state: MachineState,
    n: int,
    logger: Optional[ExecutionLogger] = None,
    halt_on_fault: bool = True,
    desc: str = None,
    **kwargs,
) -> tuple[MachineState, Optional[StepResult]]:
    """Run up to ``n`` steps headless with a tqdm progress bar.

    Stops early on a fault when ``halt_on_fault`` is set, when the program
    counter has run off the end of memory, or when the program waits for a
    key since nothing will ever press one.

    Returns:
        The final state and the step result that stopped the run, if any.
    """
    if desc is None:
        desc = f"Running ({n:,} steps)"

    stopped_by = None
    with tqdm(total=n, desc=desc, unit="step", **kwargs) as progress:
        for _ in range(n):
            result = stepper.step(state)
            state = result.state
            if logger is not None:
                logger.log_step(result)
            progress.update(1)
            if result.awaiting_key or result.stuck or (result.fault is not None and halt_on_fault):
                stopped_by = result
                break
    return state, stopped_by
