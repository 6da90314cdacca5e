import unittest

from chip8_disassembler import disassemble, disassemble_rom, mnemonic


class TestMnemonic(unittest.TestCase):
    def test_no_operands(self):
        self.assertEqual(mnemonic(0x00E0), "CLS")
        self.assertEqual(mnemonic(0x00EE), "RET")
        self.assertEqual(mnemonic(0x01E0), "CLS")

    def test_address(self):
        self.assertEqual(mnemonic(0x1ABC),
                         "JP         #$abc")
        self.assertEqual(mnemonic(0xB2F0),
                         "JP         V0, #$2f0")

    def test_registers(self):
        self.assertEqual(mnemonic(0x8AB4),
                         "ADD        Va, Vb")
        self.assertEqual(mnemonic(0xD125),
                         "DRW        V1, V2, #$5")
        self.assertEqual(mnemonic(0xF333),
                         "LD         B, V3")
        self.assertEqual(mnemonic(0xE5A1),
                         "SKNP       V5")

    def test_sys_and_unknown(self):
        self.assertEqual(mnemonic(0x0123),
                         "SYS        #$123")
        self.assertEqual(mnemonic(0x8128), "UNKNOWN")


class TestListing(unittest.TestCase):
    def test_disassemble(self):
        self.assertEqual(disassemble(0x200, 0x6A2F),
                         "0200 6a 2f LD         Va, #$2f")

    def test_disassemble_rom(self):
        self.assertEqual(list(disassemble_rom(b"\x00\xe0\x12\x00\xf1")),
                         ["0200 00 e0 CLS",
                          "0202 12 00 JP         #$200",
                          "0204 f1 00 UNKNOWN"])


if __name__ == "__main__":
    unittest.main()
