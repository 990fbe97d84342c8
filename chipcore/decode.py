"""CHIP-8 instruction decoding."""

import dataclasses
from typing import Union

from chex import dataclass


def _instruction(cls):
    return dataclass(frozen=True, mappable_dataclass=False)(cls)


@_instruction
class CLS:
    """00E0 - Clear display."""


@_instruction
class RET:
    """00EE - Return from subroutine."""


@_instruction
class JP:
    """1NNN - Jump to NNN."""
    addr: int


@_instruction
class CALL:
    """2NNN - Call subroutine at NNN."""
    addr: int


@_instruction
class SEB:
    """3XKK - Skip next if VX == KK."""
    x: int
    kk: int


@_instruction
class SNEB:
    """4XKK - Skip next if VX != KK."""
    x: int
    kk: int


@_instruction
class SEV:
    """5XY0 - Skip next if VX == VY."""
    x: int
    y: int


@_instruction
class LDB:
    """6XKK - VX = KK."""
    x: int
    kk: int


@_instruction
class ADDB:
    """7XKK - VX += KK, no carry."""
    x: int
    kk: int


@_instruction
class LDV:
    """8XY0 - VX = VY."""
    x: int
    y: int


@_instruction
class OR:
    """8XY1 - VX |= VY."""
    x: int
    y: int


@_instruction
class AND:
    """8XY2 - VX &= VY."""
    x: int
    y: int


@_instruction
class XOR:
    """8XY3 - VX ^= VY."""
    x: int
    y: int


@_instruction
class ADDC:
    """8XY4 - VX += VY, VF = carry."""
    x: int
    y: int


@_instruction
class SUB:
    """8XY5 - VX -= VY, VF = NOT borrow."""
    x: int
    y: int


@_instruction
class SHR:
    """8XY6 - Shift right, VF = bit shifted out."""
    x: int
    y: int


@_instruction
class SUBN:
    """8XY7 - VX = VY - VX, VF = NOT borrow."""
    x: int
    y: int


@_instruction
class SHL:
    """8XYE - Shift left, VF = bit shifted out."""
    x: int
    y: int


@_instruction
class SNEV:
    """9XY0 - Skip next if VX != VY."""
    x: int
    y: int


@_instruction
class LDI:
    """ANNN - I = NNN."""
    addr: int


@_instruction
class JPV:
    """BNNN - Jump to NNN + V0."""
    addr: int


@_instruction
class RND:
    """CXKK - VX = random byte & KK."""
    x: int
    kk: int


@_instruction
class DRW:
    """DXYN - Draw N-byte sprite at (VX, VY), VF = collision."""
    x: int
    y: int
    n: int


@_instruction
class SKP:
    """EX9E - Skip next if key VX is down."""
    x: int


@_instruction
class SKNP:
    """EXA1 - Skip next if key VX is up."""
    x: int


@_instruction
class LDVD:
    """FX07 - VX = delay timer."""
    x: int


@_instruction
class LDK:
    """FX0A - Wait for a key, VX = key."""
    x: int


@_instruction
class LDDV:
    """FX15 - Delay timer = VX."""
    x: int


@_instruction
class LDSV:
    """FX18 - Sound timer = VX."""
    x: int


@_instruction
class ADDI:
    """FX1E - I += VX."""
    x: int


@_instruction
class LDIS:
    """FX29 - I = font sprite for digit VX."""
    x: int


@_instruction
class LDD:
    """FX33 - BCD of VX at I, I+1, I+2."""
    x: int


@_instruction
class LDMV:
    """FX55 - Store V0..VX at I."""
    x: int


@_instruction
class LDVM:
    """FX65 - Load V0..VX from I."""
    x: int


@_instruction
class Unrecognized:
    """Any word that is not a known instruction, SYS calls included."""
    word: int


Instruction = Union[
    CLS, RET, JP, CALL, SEB, SNEB, SEV, LDB, ADDB, LDV, OR, AND, XOR, ADDC, SUB,
    SHR, SUBN, SHL, SNEV, LDI, JPV, RND, DRW, SKP, SKNP, LDVD, LDK, LDDV, LDSV,
    ADDI, LDIS, LDD, LDMV, LDVM, Unrecognized,
]

# Families keyed by the bits that identify them
_ADDRESS_OPS = {0x1000: JP, 0x2000: CALL, 0xA000: LDI, 0xB000: JPV}
_BYTE_OPS = {0x3000: SEB, 0x4000: SNEB, 0x6000: LDB, 0x7000: ADDB, 0xC000: RND}
_REGISTER_PAIR_OPS = {  # word & 0xF00F
    0x5000: SEV,
    0x8000: LDV, 0x8001: OR, 0x8002: AND, 0x8003: XOR, 0x8004: ADDC,
    0x8005: SUB, 0x8006: SHR, 0x8007: SUBN, 0x800E: SHL,
    0x9000: SNEV,
}
_REGISTER_OPS = {  # word & 0xF0FF
    0xE09E: SKP, 0xE0A1: SKNP,
    0xF007: LDVD, 0xF00A: LDK, 0xF015: LDDV, 0xF018: LDSV, 0xF01E: ADDI,
    0xF029: LDIS, 0xF033: LDD, 0xF055: LDMV, 0xF065: LDVM,
}


def decode(word: int) -> Instruction:
    """Decode 16-bit instruction word into a typed instruction."""
    word = int(word) & 0xFFFF
    if word == 0x00E0:
        return CLS()
    if word == 0x00EE:
        return RET()

    x = (word & 0x0F00) >> 8
    y = (word & 0x00F0) >> 4
    n = word & 0x000F
    kk = word & 0x00FF
    addr = word & 0x0FFF

    family = word & 0xF000
    if family in _ADDRESS_OPS:
        return _ADDRESS_OPS[family](addr=addr)
    if family in _BYTE_OPS:
        return _BYTE_OPS[family](x=x, kk=kk)
    if family == 0xD000:
        return DRW(x=x, y=y, n=n)
    if (word & 0xF00F) in _REGISTER_PAIR_OPS:
        return _REGISTER_PAIR_OPS[word & 0xF00F](x=x, y=y)
    if (word & 0xF0FF) in _REGISTER_OPS:
        return _REGISTER_OPS[word & 0xF0FF](x=x)
    return Unrecognized(word=word)


_SYNTAX = {
    CLS: "CLS",
    RET: "RET",
    JP: "JP 0x{addr:03X}",
    CALL: "CALL 0x{addr:03X}",
    SEB: "SE V{x:X}, 0x{kk:02X}",
    SNEB: "SNE V{x:X}, 0x{kk:02X}",
    SEV: "SE V{x:X}, V{y:X}",
    LDB: "LD V{x:X}, 0x{kk:02X}",
    ADDB: "ADD V{x:X}, 0x{kk:02X}",
    LDV: "LD V{x:X}, V{y:X}",
    OR: "OR V{x:X}, V{y:X}",
    AND: "AND V{x:X}, V{y:X}",
    XOR: "XOR V{x:X}, V{y:X}",
    ADDC: "ADD V{x:X}, V{y:X}",
    SUB: "SUB V{x:X}, V{y:X}",
    SHR: "SHR V{x:X}, V{y:X}",
    SUBN: "SUBN V{x:X}, V{y:X}",
    SHL: "SHL V{x:X}, V{y:X}",
    SNEV: "SNE V{x:X}, V{y:X}",
    LDI: "LD I, 0x{addr:03X}",
    JPV: "JP V0, 0x{addr:03X}",
    RND: "RND V{x:X}, 0x{kk:02X}",
    DRW: "DRW V{x:X}, V{y:X}, {n}",
    SKP: "SKP V{x:X}",
    SKNP: "SKNP V{x:X}",
    LDVD: "LD V{x:X}, DT",
    LDK: "LD V{x:X}, K",
    LDDV: "LD DT, V{x:X}",
    LDSV: "LD ST, V{x:X}",
    ADDI: "ADD I, V{x:X}",
    LDIS: "LD F, V{x:X}",
    LDD: "LD B, V{x:X}",
    LDMV: "LD [I], V{x:X}",
    LDVM: "LD V{x:X}, [I]",
    Unrecognized: "DW 0x{word:04X}",
}


def disassemble(instruction: Instruction) -> str:
    """Render an instruction in conventional CHIP-8 assembler syntax."""
    operands = {f.name: getattr(instruction, f.name) for f in dataclasses.fields(instruction)}
    return _SYNTAX[type(instruction)].format(**operands)
