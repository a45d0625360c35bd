"""Regression tests for raw-key decoding and key-combo dispatch.

Covers ESC timing, navigation sequences, SGR mouse wheel, and control keys.
"""

import os
import time
import unittest

from lazymodels.runtime import keys as keys_mod
from lazymodels.runtime.keys import KeyComboBinding, KeyComboRegistry


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        keys_mod._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        keys_mod._PENDING_BYTES.clear()

    def _read(self, payload: bytes, count: int = 1) -> list[str]:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, payload)
            return [keys_mod.read_key(read_fd, timeout_ms=20) for _ in range(count)]
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_single_escape_returns_quickly(self) -> None:
        started = time.monotonic()
        self.assertEqual(self._read(b"\x1b"), ["ESC"])
        self.assertLess(time.monotonic() - started, 0.2)

    def test_arrows_and_page_keys(self) -> None:
        self.assertEqual(self._read(b"\x1b[A\x1b[B\x1b[5~\x1b[6~", 4), ["UP", "DOWN", "PAGE_UP", "PAGE_DOWN"])

    def test_escape_does_not_swallow_following_key(self) -> None:
        self.assertEqual(self._read(b"\x1bq", 2), ["ESC", "q"])

    def test_control_keys(self) -> None:
        self.assertEqual(
            self._read(b"\x03\r\x7f\t\x15", 5),
            ["CTRL_C", "ENTER", "BACKSPACE", "TAB", "CTRL_U"],
        )

    def test_mouse_wheel(self) -> None:
        self.assertEqual(self._read(b"\x1b[<64;10;5M\x1b[<65;3;4M", 2), ["MOUSE_WHEEL_UP:10:5", "MOUSE_WHEEL_DOWN:3:4"])

    def test_utf8_character(self) -> None:
        self.assertEqual(self._read("é".encode("utf-8")), ["é"])

    def test_timeout_returns_empty(self) -> None:
        self.assertEqual(self._read(b""), [""])


class KeyComboRegistryTests(unittest.TestCase):
    def test_dispatch_and_normalization(self) -> None:
        calls: list[str] = []
        registry = KeyComboRegistry(normalize=str.lower).register_bindings(
            KeyComboBinding(("a", "B"), lambda: calls.append("ab") or True),
        )
        self.assertTrue(registry.dispatch("A"))
        self.assertTrue(registry.dispatch("b"))
        self.assertTrue(registry.handles("B"))
        self.assertIsNone(registry.dispatch("z"))
        self.assertEqual(calls, ["ab", "ab"])

    def test_later_binding_wins(self) -> None:
        registry = KeyComboRegistry()
        registry.register_binding(KeyComboBinding(("x",), lambda: False))
        registry.register_binding(KeyComboBinding(("x",), lambda: True))
        self.assertTrue(registry.dispatch("x"))


if __name__ == "__main__":
    unittest.main()
