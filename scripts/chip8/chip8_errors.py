class Chip8Error(Exception):
    """base class for every error the interpreter raises"""


class UnknownOpcodeError(Chip8Error):
    def __init__(self, opcode):
        self.opcode = opcode
        super().__init__(f"Unknown opcode: 0x{opcode:04X}")


class StackUnderflowError(Chip8Error):
    pass


class StackOverflowError(Chip8Error):
    pass


class RomTooLargeError(Chip8Error):
    def __init__(self, size, capacity):
        self.size, self.capacity = size, capacity
        super().__init__(f"The ROM is {size} bytes long but only {capacity} bytes are available")
