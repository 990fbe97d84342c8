"""CHIP-8 ALU operations (8xxx)."""

from typing import Optional

from chipcore.state import MachineState, get_register, set_register, set_register_with_flag
from chipcore.decode import LDV, OR, AND, XOR, ADDC, SUB, SHR, SUBN, SHL


def alu_set(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = (vx + vy) & 0xFF
    # Wrapped iff the sum came out smaller than an operand
    carry = int(result < vx)
    return result, carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY5 - Subtract: VX -= VY, set NOT borrow flag."""
    result = (vx - vy) & 0xFF
    not_borrow = int(result <= vx)
    return result, not_borrow


def alu_sub_yx(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY7 - Subtract: VX = VY - VX, set NOT borrow flag."""
    result = (vy - vx) & 0xFF
    not_borrow = int(result <= vy)
    return result, not_borrow


def alu_shift_right(value: int) -> tuple[int, int]:
    """8XY6 - Shift right by one."""
    return value >> 1, value & 1


def alu_shift_left(value: int) -> tuple[int, int]:
    """8XYE - Shift left by one."""
    return (value << 1) & 0xFF, (value & 0x80) >> 7


_BINARY_OPS = {
    LDV: alu_set,
    OR: alu_or,
    AND: alu_and,
    XOR: alu_xor,
    ADDC: alu_add,
    SUB: alu_sub_xy,
    SUBN: alu_sub_yx,
}

_SHIFT_OPS = {
    SHR: alu_shift_right,
    SHL: alu_shift_left,
}


def execute_alu_operation(state: MachineState, instruction) -> MachineState:
    """8XY0-8XY5, 8XY7 - Register to register arithmetic and logic."""
    vx = get_register(state, instruction.x)
    vy = get_register(state, instruction.y)
    result, vf = _BINARY_OPS[type(instruction)](vx, vy)
    if vf is None:
        return set_register(state, instruction.x, result)
    return set_register_with_flag(state, instruction.x, result, vf)


def execute_shift(state: MachineState, instruction) -> MachineState:
    """8XY6/8XYE - Shift, source register chosen by the shift quirk."""
    source = instruction.x if state.quirks.high_precision_shift else instruction.y
    result, vf = _SHIFT_OPS[type(instruction)](get_register(state, source))
    return set_register_with_flag(state, instruction.x, result, vf)
