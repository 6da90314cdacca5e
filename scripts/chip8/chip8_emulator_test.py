import contextlib
import io
import os
import tempfile
import unittest
from collections import defaultdict

from pygame.locals import K_1, K_4, K_p, K_v, K_x

from chip8_emulator import KEY_MAPPINGS, get_args, main, read_keypad, read_rom


class TestKeypad(unittest.TestCase):
    def test_all_keys_mapped(self):
        self.assertEqual(sorted(KEY_MAPPINGS.values()), list(range(16)))

    def test_read_keypad(self):
        pressed = defaultdict(bool, {K_1: True, K_4: True, K_x: True, K_v: True, K_p: True})
        keypad = read_keypad(pressed)
        self.assertEqual(len(keypad), 16)
        self.assertEqual([k for k, down in enumerate(keypad) if down], [0x0, 0x1, 0xC, 0xF])

    def test_nothing_pressed(self):
        self.assertEqual(read_keypad(defaultdict(bool)), [False] * 16)


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        fd, self.path = tempfile.mkstemp(suffix=".ch8")
        with os.fdopen(fd, "wb") as f:
            f.write(b"\x00\xe0\xa2\x2a")

    def tearDown(self):
        os.remove(self.path)

    def test_defaults(self):
        args = get_args(["-f", self.path])
        self.assertEqual((args.file, args.cycles, args.scale, args.disassemble), (self.path, 10, 15, False))

    def test_invalid_cycles(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                get_args(["-f", self.path, "-c", "0"])

    def test_read_rom(self):
        self.assertEqual(read_rom(self.path), b"\x00\xe0\xa2\x2a")

    def test_disassemble_mode(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main(["-f", self.path, "--disassemble"])
        self.assertEqual(out.getvalue().splitlines(),
                         ["0200 00 e0 CLS",
                          "0202 a2 2a LD         I, #$22a"])


if __name__ == "__main__":
    unittest.main()
