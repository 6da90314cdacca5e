"""
pygame front end of the CHIP-8 interpreter

usage: python chip8_emulator.py -f rom.ch8 [-c CYCLES] [-s SCALE] [-d]
set DEBUG=1 in the environment to trace every executed instruction
"""
import argparse
import sys

import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_1, K_2, K_3, K_4,
    K_q, K_w, K_e, K_r,
    K_a, K_s, K_d, K_f,
    K_z, K_x, K_c, K_v,
)

from chip8 import DEBUG, KEYS_COUNT, SCREEN_HEIGHT, SCREEN_WIDTH, Chip8
from chip8_disassembler import disassemble_rom
from chip8_errors import Chip8Error


# ******************** STATIC SECTION
# keypad layout:    keyboard layout:
#   1 2 3 C           1 2 3 4
#   4 5 6 D           Q W E R
#   7 8 9 E           A S D F
#   A 0 B F           Z X C V
KEY_MAPPINGS = {
    K_1: 0x1, K_2: 0x2, K_3: 0x3, K_4: 0xC,
    K_q: 0x4, K_w: 0x5, K_e: 0x6, K_r: 0xD,
    K_a: 0x7, K_s: 0x8, K_d: 0x9, K_f: 0xE,
    K_z: 0xA, K_x: 0x0, K_c: 0xB, K_v: 0xF,
}

TIMERS_HZ = 60
CYCLES_PER_FRAME = 10
SCALE = 15
BLUE = pygame.Color(80,69,155,255)
LIGHT_BLUE = pygame.Color(136,126,203,255)


# ******************** UTILITIES SECTION
def get_args(argv=None):
    parser = argparse.ArgumentParser(description="CHIP-8 interpreter")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("-c", "--cycles", type=int, default=CYCLES_PER_FRAME,
                        help=f"instructions executed every 1/{TIMERS_HZ} of a second")
    parser.add_argument("-s", "--scale", type=int, default=SCALE, help="size in pixels of a CHIP-8 pixel")
    parser.add_argument("-d", "--disassemble", action="store_true", help="print the rom listing and exit")
    args = parser.parse_args(argv)
    if args.cycles < 1:
        parser.error("--cycles must be a positive number")
    if args.scale < 1:
        parser.error("--scale must be a positive number")
    return args

def read_rom(path):
    """read the ROM bytes from the file at path"""
    with open(path, mode='rb') as f:
        rom = f.read()
    if DEBUG: print(f"The ROM at path {path} has been read successfully")
    return rom

def read_keypad(pressed):
    """map the state of the physical keys (as returned by pygame.key.get_pressed) to the 16 keys keypad"""
    keypad = [False] * KEYS_COUNT
    for key, chip_key in KEY_MAPPINGS.items():
        if pressed[key]:
            keypad[chip_key] = True
    return keypad


# ******************** I/O SECTION
class Screen:
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
        )
        self.surface.fill(self.background)

    def render(self, buffer):
        """paint every pixel of the row-major buffer and flip the display"""
        self.surface.fill(self.background)
        for pos, pixel in enumerate(buffer):
            if pixel:
                x, y = pos % self.w, pos // self.w
                pygame.draw.rect(
                    self.surface,
                    self.foreground,
                    (x * self.scale, y * self.scale, self.scale, self.scale)
                )
        pygame.display.flip()


# ******************** ENTRY POINT SECTION
def run(chip, screen, cycles):
    """emulation loop, returns when the window is closed or ESC is pressed"""
    clock = pygame.time.Clock()
    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return
        chip.set_keys(read_keypad(pygame.key.get_pressed()))
        redraw = False
        for _ in range(cycles):
            chip.cycle()        # emulate one machine cycle (fetch opcode, decode opcode, execute opcode)
            redraw = redraw or chip.draw
        if redraw:
            screen.render(chip.display)
        chip.decrement_timers()
        clock.tick(TIMERS_HZ)

def main(argv=None):
    args = get_args(argv)
    rom = read_rom(args.file)
    if args.disassemble:
        for line in disassemble_rom(rom):
            print(line)
        return
    chip = Chip8()
    try:
        chip.load_rom(rom)
    except Chip8Error as err:
        sys.exit(f"Cannot load {args.file}: {err}")
    # pygame initialization
    pygame.init()
    pygame.display.set_caption(os.path.basename(args.file))
    try:
        run(chip, Screen(s=args.scale), args.cycles)
    except Chip8Error as err:
        sys.exit(f"********** THE EMULATOR CRASHED: {err}\n{chip}\n{chip.dump_info()}")
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
