import unittest

from chip8_errors import UnknownOpcodeError
from chip8_opcodes import Instruction, Op, decode


class TestDecoding(unittest.TestCase):
    def test_fields(self):
        self.assertEqual(decode(0xD123),
                         Instruction(Op.DRW, 0xD123, x=0x1, y=0x2, n=0x3, kk=0x23, nnn=0x123))

    def test_every_operation(self):
        words = {
            0x00E0: Op.CLS, 0x00EE: Op.RET, 0x1234: Op.JP, 0x2234: Op.CALL,
            0x3A12: Op.SE_BYTE, 0x4A12: Op.SNE_BYTE, 0x5AB0: Op.SE_REG, 0x6A12: Op.LD_BYTE,
            0x7A12: Op.ADD_BYTE, 0x8AB0: Op.LD_REG, 0x8AB1: Op.OR, 0x8AB2: Op.AND,
            0x8AB3: Op.XOR, 0x8AB4: Op.ADD_REG, 0x8AB5: Op.SUB, 0x8AB6: Op.SHR,
            0x8AB7: Op.SUBN, 0x8ABE: Op.SHL, 0x9AB0: Op.SNE_REG, 0xA123: Op.LD_I,
            0xB123: Op.JP_V0, 0xCA12: Op.RND, 0xDAB5: Op.DRW, 0xEA9E: Op.SKP,
            0xEAA1: Op.SKNP, 0xFA07: Op.LD_VX_DT, 0xFA0A: Op.LD_VX_K, 0xFA15: Op.LD_DT_VX,
            0xFA18: Op.LD_ST_VX, 0xFA1E: Op.ADD_I, 0xFA29: Op.LD_F, 0xFA33: Op.LD_B,
            0xFA55: Op.LD_MEM_VX, 0xFA65: Op.LD_VX_MEM,
        }
        self.assertEqual(set(words.values()), set(Op))
        for word, op in words.items():
            self.assertEqual(decode(word).op, op, hex(word))

    def test_loose_words(self):
        self.assertEqual(decode(0x5AB3).op, Op.SE_REG)
        self.assertEqual(decode(0x9ABF).op, Op.SNE_REG)
        self.assertEqual(decode(0x01E0).op, Op.CLS)
        self.assertEqual(decode(0x0FEE).op, Op.RET)

    def test_unknown(self):
        for word in (0x0000, 0x0123, 0x01E1, 0x00E1, 0x8AB8, 0x8ABF,
                     0xEA9F, 0xE000, 0xF000, 0xFA66, 0xFFFF):
            with self.assertRaises(UnknownOpcodeError, msg=hex(word)) as ctx:
                decode(word)
            self.assertEqual(ctx.exception.opcode, word)

    def test_error_message(self):
        with self.assertRaises(UnknownOpcodeError) as ctx:
            decode(0x8ABF)
        self.assertIn("0x8ABF", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
