"""
CHIP-8 disassembler

stateless helpers turning raw instruction words into fixed width listing lines,
they are only meant for inspecting ROM images and are never used by the interpreter
"""
from chip8 import ROM_START_ADDRESS
from chip8_errors import UnknownOpcodeError
from chip8_opcodes import Op, decode


# mnemonic and operands template of every operation
LISTING = {
    Op.CLS: ("CLS", ""),
    Op.RET: ("RET", ""),
    Op.JP: ("JP", "#${nnn:03x}"),
    Op.CALL: ("CALL", "#${nnn:03x}"),
    Op.SE_BYTE: ("SE", "V{x:01x}, #${kk:02x}"),
    Op.SNE_BYTE: ("SNE", "V{x:01x}, #${kk:02x}"),
    Op.SE_REG: ("SE", "V{x:01x}, V{y:01x}"),
    Op.LD_BYTE: ("LD", "V{x:01x}, #${kk:02x}"),
    Op.ADD_BYTE: ("ADD", "V{x:01x}, #${kk:02x}"),
    Op.LD_REG: ("LD", "V{x:01x}, V{y:01x}"),
    Op.OR: ("OR", "V{x:01x}, V{y:01x}"),
    Op.AND: ("AND", "V{x:01x}, V{y:01x}"),
    Op.XOR: ("XOR", "V{x:01x}, V{y:01x}"),
    Op.ADD_REG: ("ADD", "V{x:01x}, V{y:01x}"),
    Op.SUB: ("SUB", "V{x:01x}, V{y:01x}"),
    Op.SHR: ("SHR", "V{x:01x} {{, V{y:01x}}}"),
    Op.SUBN: ("SUBN", "V{x:01x}, V{y:01x}"),
    Op.SHL: ("SHL", "V{x:01x} {{, V{y:01x}}}"),
    Op.SNE_REG: ("SNE", "V{x:01x}, V{y:01x}"),
    Op.LD_I: ("LD", "I, #${nnn:03x}"),
    Op.JP_V0: ("JP", "V0, #${nnn:03x}"),
    Op.RND: ("RND", "V{x:01x}, #${kk:02x}"),
    Op.DRW: ("DRW", "V{x:01x}, V{y:01x}, #${n:01x}"),
    Op.SKP: ("SKP", "V{x:01x}"),
    Op.SKNP: ("SKNP", "V{x:01x}"),
    Op.LD_VX_DT: ("LD", "V{x:01x}, DT"),
    Op.LD_VX_K: ("LD", "V{x:01x}, K"),
    Op.LD_DT_VX: ("LD", "DT, V{x:01x}"),
    Op.LD_ST_VX: ("LD", "ST, V{x:01x}"),
    Op.ADD_I: ("ADD", "I, V{x:01x}"),
    Op.LD_F: ("LD", "F, V{x:01x}"),
    Op.LD_B: ("LD", "B, V{x:01x}"),
    Op.LD_MEM_VX: ("LD", "[I], V{x:01x}"),
    Op.LD_VX_MEM: ("LD", "V{x:01x}, [I]"),
}


def mnemonic(opcode):
    """assembly text of a single instruction word, without address and raw bytes"""
    try:
        ins = decode(opcode)
    except UnknownOpcodeError:
        # 0nnn jumps to a native routine of the original interpreters
        if opcode & 0xF000 == 0:
            return f"{'SYS':<10} #${opcode & 0x0FFF:03x}"
        return "UNKNOWN"
    name, operands = LISTING[ins.op]
    return f"{name:<10} {operands.format(**ins._asdict())}".rstrip()


def disassemble(pc, opcode):
    """listing line made of address, the two raw bytes and the assembly"""
    return f"{pc:04x} {opcode >> 8 & 0xFF:02x} {opcode & 0xFF:02x} {mnemonic(opcode)}"


def disassemble_rom(rom, start=ROM_START_ADDRESS):
    """yield a listing line for every word of the ROM, a trailing odd byte is padded with zero"""
    rom = bytes(rom)
    for offset in range(0, len(rom), 2):
        high = rom[offset]
        low = rom[offset + 1] if offset + 1 < len(rom) else 0
        yield disassemble(start + offset, high << 8 | low)
