"""
decoding of CHIP-8 instruction words

every 16-bit word is split into its operand fields and tagged with the Op it
encodes; the interpreter and the disassembler both dispatch on that tag
"""
from enum import Enum
from typing import NamedTuple

from chip8_errors import UnknownOpcodeError


class Op(Enum):
    CLS = "00E0"
    RET = "00EE"
    JP = "1nnn"
    CALL = "2nnn"
    SE_BYTE = "3xkk"
    SNE_BYTE = "4xkk"
    SE_REG = "5xy0"
    LD_BYTE = "6xkk"
    ADD_BYTE = "7xkk"
    LD_REG = "8xy0"
    OR = "8xy1"
    AND = "8xy2"
    XOR = "8xy3"
    ADD_REG = "8xy4"
    SUB = "8xy5"
    SHR = "8xy6"
    SUBN = "8xy7"
    SHL = "8xyE"
    SNE_REG = "9xy0"
    LD_I = "Annn"
    JP_V0 = "Bnnn"
    RND = "Cxkk"
    DRW = "Dxyn"
    SKP = "Ex9E"
    SKNP = "ExA1"
    LD_VX_DT = "Fx07"
    LD_VX_K = "Fx0A"
    LD_DT_VX = "Fx15"
    LD_ST_VX = "Fx18"
    ADD_I = "Fx1E"
    LD_F = "Fx29"
    LD_B = "Fx33"
    LD_MEM_VX = "Fx55"
    LD_VX_MEM = "Fx65"


class Instruction(NamedTuple):
    op: Op
    opcode: int
    x: int
    y: int
    n: int
    kk: int
    nnn: int


# families whose meaning depends only on the top nibble, the low nibble of 5xy0 and 9xy0 is ignored
FAMILIES = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_BYTE,
    0x4: Op.SNE_BYTE,
    0x5: Op.SE_REG,
    0x6: Op.LD_BYTE,
    0x7: Op.ADD_BYTE,
    0x9: Op.SNE_REG,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}

# (family, sub-opcode) pairs; family 0x8 is keyed by the low nibble, the others by the low byte
SUB_OPS = {
    (0x0, 0xE0): Op.CLS,
    (0x0, 0xEE): Op.RET,
    (0x8, 0x0): Op.LD_REG,
    (0x8, 0x1): Op.OR,
    (0x8, 0x2): Op.AND,
    (0x8, 0x3): Op.XOR,
    (0x8, 0x4): Op.ADD_REG,
    (0x8, 0x5): Op.SUB,
    (0x8, 0x6): Op.SHR,
    (0x8, 0x7): Op.SUBN,
    (0x8, 0xE): Op.SHL,
    (0xE, 0x9E): Op.SKP,
    (0xE, 0xA1): Op.SKNP,
    (0xF, 0x07): Op.LD_VX_DT,
    (0xF, 0x0A): Op.LD_VX_K,
    (0xF, 0x15): Op.LD_DT_VX,
    (0xF, 0x18): Op.LD_ST_VX,
    (0xF, 0x1E): Op.ADD_I,
    (0xF, 0x29): Op.LD_F,
    (0xF, 0x33): Op.LD_B,
    (0xF, 0x55): Op.LD_MEM_VX,
    (0xF, 0x65): Op.LD_VX_MEM,
}


def decode(opcode):
    """split an instruction word into its fields, raise UnknownOpcodeError if it encodes no operation"""
    opcode &= 0xFFFF
    family = (opcode & 0xF000) >> 12
    x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
    n, kk, nnn = opcode & 0x000F, opcode & 0x00FF, opcode & 0x0FFF

    op = FAMILIES.get(family)
    if op is None:
        # family 0 is matched on the low byte alone (0nE0 is CLS), any other 0nnn (SYS) is not executed
        sub = n if family == 0x8 else kk
        op = SUB_OPS.get((family, sub))
    if op is None:
        raise UnknownOpcodeError(opcode)
    return Instruction(op, opcode, x, y, n, kk, nnn)
