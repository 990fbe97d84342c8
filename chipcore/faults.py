"""Fault reporting for instruction execution and stepping."""

import enum
from typing import Any, NamedTuple, Optional


class Fault(enum.Enum):
    """Conditions under which an instruction or a cycle is not performed."""
    UNRECOGNIZED_OPCODE = "unrecognized opcode"
    PROGRAM_COUNTER_OUT_OF_BOUNDS = "program counter out of bounds"
    STACK_OVERFLOW = "stack overflow"
    STACK_UNDERFLOW = "stack underflow"
    MEMORY_RANGE_OUT_OF_BOUNDS = "memory range out of bounds"


class MachineFault(Exception):
    """Raised by instruction handlers; carries the offending ``Fault``."""

    def __init__(self, fault: Fault, message: str = ""):
        self.fault = fault
        super().__init__(message or fault.value)


class ExecutionResult(NamedTuple):
    """Outcome of executing one instruction.

    On a fault ``state`` is the state the instruction was given, untouched.
    ``awaiting_key`` is set by LDK when no key is down.
    """
    state: Any
    fault: Optional[Fault] = None
    awaiting_key: bool = False

    @property
    def ok(self) -> bool:
        return self.fault is None


class StepResult(NamedTuple):
    """Outcome of one fetch/decode/execute cycle."""
    state: Any
    instruction: Any = None
    address: int = 0
    fault: Optional[Fault] = None
    awaiting_key: bool = False

    @property
    def ok(self) -> bool:
        return self.fault is None

    @property
    def stuck(self) -> bool:
        """True when stepping again from this state cannot make progress."""
        return self.fault is Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS

    def raise_for_fault(self) -> "StepResult":
        """Raise ``MachineFault`` if this step faulted, else return self."""
        if self.fault is not None:
            raise MachineFault(self.fault, f"{self.fault.value} at 0x{self.address:03X}")
        return self
