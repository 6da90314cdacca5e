# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
#
# TEST SUITE
# https://github.com/Timendus/chip8-test-suite
#
# Only the original CHIP-8 semantics are implemented, none of the SUPER-CHIP / XO-CHIP quirks.


import os
import random
from functools import wraps

from chip8_errors import RomTooLargeError, StackOverflowError, StackUnderflowError
from chip8_opcodes import Op, decode


# ******************** STATIC SECTION
C8_FONTS = [0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
            0x20, 0x60, 0x20, 0x20, 0x70,  # 1
            0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
            0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
            0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
            0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
            0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
            0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
            0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
            0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
            0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
            0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
            0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
            0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
            0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
            0xF0, 0x80, 0xF0, 0x80, 0x80]  # F

MEMORY_SIZE = 4096
FONT_START_ADDRESS = 0x050
FONT_HEIGHT = 5                 # each character font is made of 5 bytes
FONT_END_ADDRESS = FONT_START_ADDRESS + len(C8_FONTS)
ROM_START_ADDRESS = 0x200
ROM_MAX_SIZE = MEMORY_SIZE - ROM_START_ADDRESS
STACK_SIZE = 16
REGISTERS_COUNT = 16
KEYS_COUNT = 16
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to print out the ASM of the instruction being executed"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(self, ins):
            mem_addr = self.pc - 0x2    # the program counter already points to the following instruction
            fn(self, ins)
            if DEBUG: print(msg.format(mem_addr=mem_addr, **ins._asdict()))
        return wrapper_fn
    return decorator


# ******************** MEMORY SECTION
# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self):
        self.addr_list = [0] * STACK_SIZE
        self.sp = 0

    def __len__(self):
        return self.sp

    def __str__(self):
        return str(self.addr_list[:self.sp])

    def append(self, address):
        if self.sp >= STACK_SIZE:
            raise StackOverflowError(f"The CHIP-8 stack can contain at most {STACK_SIZE} addresses. Limit exceeded")
        self.addr_list[self.sp] = address
        self.sp += 1

    def pop(self):
        if self.sp == 0:
            raise StackUnderflowError("Return from a subroutine with an empty stack")
        self.sp -= 1
        return self.addr_list[self.sp]

# ********** WRAPS A LIST TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    """
    every address is folded into the 4KB range before being used,
    writes landing on the font sprites are dropped so the glyphs stay intact
    """
    def __init__(self):
        self.inner = [0] * MEMORY_SIZE
        self.inner[FONT_START_ADDRESS:FONT_END_ADDRESS] = C8_FONTS

    def __len__(self):
        return len(self.inner)

    def __setitem__(self, key, value):
        key &= MEMORY_SIZE - 1
        if FONT_START_ADDRESS <= key < FONT_END_ADDRESS:
            return
        self.inner[key] = value & 0xFF

    def __getitem__(self, index):
        return self.inner[index & (MEMORY_SIZE - 1)]

    def load_rom(self, rom):
        """copy the ROM bytes at the start address, reject ROMs that don't fit in the memory left"""
        rom = bytes(rom)
        if len(rom) > ROM_MAX_SIZE:
            raise RomTooLargeError(len(rom), ROM_MAX_SIZE)
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS+len(rom)] = rom
        if DEBUG: print(f"A ROM of {len(rom)} bytes has been loaded successfully")

    def dump(self):
        """hex listing of the whole memory, 16 bytes per line"""
        lines = []
        for addr in range(0, MEMORY_SIZE, 16):
            chunk = " ".join(f"{b:02X}" for b in self.inner[addr:addr+16])
            lines.append(f"0x{addr:03X}: {chunk}")
        return "\n".join(lines)


# ******************** CPU SECTION
class Chip8:
    def __init__(self, rng=None):
        self.mem = Memory()
        self.stack = Stack()
        self.v_regs = [0] * REGISTERS_COUNT
        self.pc = ROM_START_ADDRESS
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.display = [0] * SCREEN_WIDTH * SCREEN_HEIGHT
        self.keypad = [False] * KEYS_COUNT
        self.draw = False
        self.rng = rng or random.Random()
        self.instructions = {
            Op.CLS: self._clear_screen,
            Op.RET: self._return,
            Op.JP: self._jump,
            Op.CALL: self._call_addr,
            Op.SE_BYTE: self._skip_if_eq,
            Op.SNE_BYTE: self._skip_if_not_eq,
            Op.SE_REG: self._skip_if_eq_regs,
            Op.LD_BYTE: self._set_vk,
            Op.ADD_BYTE: self._add_to_vk,
            Op.LD_REG: self._set_vx_to_vy,
            Op.OR: self._set_vx_or_vy,
            Op.AND: self._set_vx_and_vy,
            Op.XOR: self._set_vx_xor_vy,
            Op.ADD_REG: self._add_vx_vy,
            Op.SUB: self._sub_vx_vy,
            Op.SHR: self._shr,
            Op.SUBN: self._subn_vx_vy,
            Op.SHL: self._shl,
            Op.SNE_REG: self._skip_if_not_eq_regs,
            Op.LD_I: self._set_idx,
            Op.JP_V0: self._jump_plus,
            Op.RND: self._random_byte_and,
            Op.DRW: self._to_screen,
            Op.SKP: self._skip_if_pressed,
            Op.SKNP: self._skip_if_not_pressed,
            Op.LD_VX_DT: self._set_vx_dt,
            Op.LD_VX_K: self._wait_keypress,
            Op.LD_DT_VX: self._set_dt_vx,
            Op.LD_ST_VX: self._set_st,
            Op.ADD_I: self._add_to_idx,
            Op.LD_F: self._select_char,
            Op.LD_B: self._bcd_repr,
            Op.LD_MEM_VX: self._store_vregs,
            Op.LD_VX_MEM: self._load_vregs,
        }

    def __str__(self):
        registers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | VARIABLE_REGISTERS:{self.v_regs}"
        stack = f"STACK:{self.stack}"
        flags = f"DRAW: {self.draw}"
        return f"{registers}\n{stack}\n{flags}"

    # ********** HOST INTERFACE
    def load_rom(self, rom):
        self.mem.load_rom(rom)

    def set_keys(self, keys):
        """overwrite the whole keypad with a snapshot of the 16 keys"""
        keys = [bool(k) for k in keys]
        if len(keys) != KEYS_COUNT:
            raise ValueError(f"The keypad has {KEYS_COUNT} keys, got {len(keys)}")
        self.keypad[:] = keys

    def decrement_timers(self):
        """to be called at 60Hz, independently from the instructions execution rate"""
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1

    def dump_info(self):
        return "\n".join([
            f"PC: 0x{self.pc:04x}",
            f"V: {self.v_regs}",
            f"I: 0x{self.idx:04x}",
            f"SP: {self.stack.sp}",
            f"Stack: {self.stack.addr_list}",
            f"Delay: {self.dt}",
            f"Sound: {self.st}",
        ])

    def dump_mem(self):
        return self.mem.dump()

    # ********** INSTRUCTIONS
    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CLS")
    def _clear_screen(self, ins):
        self.display[:] = [0] * len(self.display)
        self.draw = True

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RET")
    def _return(self, ins):
        """return from a subroutine"""
        self.pc = self.stack.pop()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP 0x{nnn:03x}")
    def _jump(self, ins):
        self.pc = ins.nnn

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CALL 0x{nnn:03x}")
    def _call_addr(self, ins):
        self.stack.append(self.pc)
        self.pc = ins.nnn

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x:X}, 0x{kk:02x}")
    def _skip_if_eq(self, ins):
        if self.v_regs[ins.x] == ins.kk:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x:X}, 0x{kk:02x}")
    def _skip_if_not_eq(self, ins):
        if self.v_regs[ins.x] != ins.kk:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x:X}, V{y:X}")
    def _skip_if_eq_regs(self, ins):
        if self.v_regs[ins.x] == self.v_regs[ins.y]:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x:X}, V{y:X}")
    def _skip_if_not_eq_regs(self, ins):
        if self.v_regs[ins.x] != self.v_regs[ins.y]:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, 0x{kk:02x}")
    def _set_vk(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        self.v_regs[ins.x] = ins.kk

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x:X}, 0x{kk:02x}")
    def _add_to_vk(self, ins):
        """add to the value already present in Vx, VF is left untouched"""
        self.v_regs[ins.x] = (self.v_regs[ins.x] + ins.kk) & 0xFF

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, V{y:X}")
    def _set_vx_to_vy(self, ins):
        self.v_regs[ins.x] = self.v_regs[ins.y]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: OR V{x:X}, V{y:X}")
    def _set_vx_or_vy(self, ins):
        self.v_regs[ins.x] |= self.v_regs[ins.y]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: AND V{x:X}, V{y:X}")
    def _set_vx_and_vy(self, ins):
        self.v_regs[ins.x] &= self.v_regs[ins.y]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: XOR V{x:X}, V{y:X}")
    def _set_vx_xor_vy(self, ins):
        self.v_regs[ins.x] ^= self.v_regs[ins.y]

    # the arithmetic instructions below read both operands before writing anything,
    # then write Vx and the flag last so that VF holds the flag even when x is 0xF

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x:X}, V{y:X}")
    def _add_vx_vy(self, ins):
        """set Vx = Vx + Vy, set VF = carry"""
        total = self.v_regs[ins.x] + self.v_regs[ins.y]
        self.v_regs[ins.x] = total & 0xFF     # keep only the lowest 8 bits
        self.v_regs[0xF] = 1 if total > 0xFF else 0

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUB V{x:X}, V{y:X}")
    def _sub_vx_vy(self, ins):
        """set Vx = Vx - Vy, set VF = NOT borrow"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[ins.x] = (vx - vy) & 0xFF
        self.v_regs[0xF] = 1 if vx >= vy else 0

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHR V{x:X}")
    def _shr(self, ins):
        """set Vx = Vx SHR 1, VF = bit shifted out"""
        vx = self.v_regs[ins.x]
        self.v_regs[ins.x] = vx >> 1
        self.v_regs[0xF] = vx & 0x1

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUBN V{x:X}, V{y:X}")
    def _subn_vx_vy(self, ins):
        """set Vx = Vy - Vx, set VF = NOT borrow"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[ins.x] = (vy - vx) & 0xFF
        self.v_regs[0xF] = 1 if vy >= vx else 0

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHL V{x:X}")
    def _shl(self, ins):
        """set Vx = Vx SHL 1, VF = bit shifted out"""
        vx = self.v_regs[ins.x]
        self.v_regs[ins.x] = (vx << 1) & 0xFF
        self.v_regs[0xF] = (vx & 0x80) >> 7

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD I, 0x{nnn:03x}")
    def _set_idx(self, ins):
        self.idx = ins.nnn

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP V0, 0x{nnn:03x}")
    def _jump_plus(self, ins):
        self.pc = ins.nnn + self.v_regs[0x0]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RND V{x:X}, 0x{kk:02x}")
    def _random_byte_and(self, ins):
        self.v_regs[ins.x] = self.rng.randint(0, 255) & ins.kk

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: DRW V{x:X}, V{y:X}, {n}")
    def _to_screen(self, ins):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = 1 on collision"""
        x, y = self.v_regs[ins.x], self.v_regs[ins.y]
        # VF is only ever set here, a draw without collision leaves it as it was
        for i in range(ins.n):
            sprite_byte = self.mem[self.idx + i]
            # both coordinates wrap around the screen pixel by pixel
            y_coordinate = (y + i) % SCREEN_HEIGHT
            for j in range(8):
                bit = (sprite_byte >> (7 - j)) & 0x1
                if not bit:
                    continue
                x_coordinate = (x + j) % SCREEN_WIDTH
                pos = y_coordinate * SCREEN_WIDTH + x_coordinate
                # sprites are XORed onto the screen: a pixel that is ON
                # and gets drawn again is erased, which is a collision
                if self.display[pos]:
                    self.v_regs[0xF] = 1
                self.display[pos] ^= 1
        self.draw = True

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKP V{x:X}")
    def _skip_if_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        if self.keypad[self.v_regs[ins.x] & 0xF]:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKNP V{x:X}")
    def _skip_if_not_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        if not self.keypad[self.v_regs[ins.x] & 0xF]:
            self._goto_next_instruction()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, DT")
    def _set_vx_dt(self, ins):
        self.v_regs[ins.x] = self.dt

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, K")
    def _wait_keypress(self, ins):
        """wait for a key press and store the lowest pressed key in Vx"""
        for key, pressed in enumerate(self.keypad):
            if pressed:
                self.v_regs[ins.x] = key
                return
        self.pc -= 0x2      # stay on the same instruction until a key is pressed

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD DT, V{x:X}")
    def _set_dt_vx(self, ins):
        self.dt = self.v_regs[ins.x]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD ST, V{x:X}")
    def _set_st(self, ins):
        self.st = self.v_regs[ins.x]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD I, V{x:X}")
    def _add_to_idx(self, ins):
        """set I = I + Vx, I is a 16-bit register"""
        self.idx = (self.idx + self.v_regs[ins.x]) & 0xFFFF

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD F, V{x:X}")
    def _select_char(self, ins):
        """set I to location of sprite for digit Vx"""
        self.idx = self.v_regs[ins.x] * FONT_HEIGHT + FONT_START_ADDRESS

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD B, V{x:X}")
    def _bcd_repr(self, ins):
        """store the hundreds digit of Vx in memory at I, the tens digit at I+1, the ones digit at I+2"""
        value = self.v_regs[ins.x]
        self.mem[self.idx] = value // 100
        self.mem[self.idx + 1] = (value // 10) % 10
        self.mem[self.idx + 2] = value % 10

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD [I], V{x:X}")
    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I"""
        for i in range(ins.x + 1):
            self.mem[self.idx + i] = self.v_regs[i]

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, [I]")
    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I"""
        for i in range(ins.x + 1):
            self.v_regs[i] = self.mem[self.idx + i]

    def _goto_next_instruction(self):
        self.pc += 0x2

    # ********** EXECUTION
    def execute(self, opcode):
        """move past the instruction, decode it and apply it; raise UnknownOpcodeError for invalid words"""
        self._goto_next_instruction()
        instruction = decode(opcode)
        self.instructions[instruction.op](instruction)

    def cycle(self):
        self.draw = False
        # fetch (each instruction is two bytes long)
        opcode = self.mem[self.pc] << 8 | self.mem[self.pc + 1]
        self.execute(opcode)
