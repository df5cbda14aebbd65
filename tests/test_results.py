import unittest

from mactrace.results import (
    ADDRESS_RETURNING,
    BYTE_COUNT_RETURNING,
    ERROR_BAND_START,
    FD_RETURNING,
    format_result,
)


class FormatResultTestCase(unittest.TestCase):
    def test_byte_count(self):
        self.assertEqual("2293", format_result("read", "0x8f5", False))

    def test_descriptor(self):
        self.assertEqual("<fd:3>", format_result("open", "0x3", False))

    def test_address(self):
        self.assertEqual("0x104a3c000", format_result("mmap", "0x104a3c000", False))

    def test_unclassified(self):
        test_cases = [
            ("zero", "0x0", "0"),
            ("small", "0x1f", "31"),
            ("address-like", "0x16b470000", "0x16b470000"),
        ]
        for message, raw, expected in test_cases:
            with self.subTest(message, raw=raw):
                self.assertEqual(expected, format_result("csops", raw, False))

    def test_errors(self):
        test_cases = [
            ("zero", "0x0", "-1"),
            ("minus one", "-1", "-1"),
            ("all ones", "0xffffffffffffffff", "-1"),
            ("high band", "0xfffffffffffffffe", "-1"),
            ("band start", "0xffffffff00000000", "-1"),
            ("errno value", "0x2", "2"),
            ("32-bit minus one", "0xffffffff", "4294967295"),
        ]
        for message, raw, expected in test_cases:
            with self.subTest(message, raw=raw):
                self.assertEqual(expected, format_result("open", raw, True))

    def test_error_shaped_value_without_error_flag(self):
        self.assertEqual("0xffffffffffffffff", format_result("open", "0xffffffffffffffff", False))
        self.assertEqual("-1", format_result("read", "-1", False))
        self.assertEqual("0xffffffff00000010", format_result("mmap", "0xffffffff00000010", False))

    def test_sign_bit_set_without_error_flag(self):
        test_cases = [
            ("descriptor", "open", "0x8000000000000000"),
            ("byte count", "read", "0xfffffffeffffffff"),
            ("unclassified", "csops", "0x8000000000000001"),
        ]
        for message, name, raw in test_cases:
            with self.subTest(message, raw=raw):
                self.assertEqual(raw, format_result(name, raw, False))
        self.assertEqual("9223372036854775807", format_result("read", "0x7fffffffffffffff", False))

    def test_unparseable_result(self):
        self.assertEqual("n/a", format_result("read", "n/a", False))
        self.assertEqual("n/a", format_result("read", "n/a", True))

    def test_name_sets_are_disjoint(self):
        self.assertFalse(FD_RETURNING & ADDRESS_RETURNING)
        self.assertFalse(FD_RETURNING & BYTE_COUNT_RETURNING)
        self.assertFalse(ADDRESS_RETURNING & BYTE_COUNT_RETURNING)

    def test_total_and_deterministic(self):
        values = [0, 1, 0xFFFF, 0x10000, 0x7FFFFFFFFFFFFFFF, 0x8000000000000000, ERROR_BAND_START - 1]
        values += [ERROR_BAND_START, 0xFFFFFFFFFFFFFFFF]
        for name in ("read", "open", "mmap", "csops"):
            for v in values:
                for is_error in (False, True):
                    raw = "0x%x" % v
                    with self.subTest(name, raw=raw, is_error=is_error):
                        first = format_result(name, raw, is_error)
                        self.assertIsInstance(first, str)
                        self.assertEqual(first, format_result(name, raw, is_error))


if __name__ == "__main__":
    unittest.main()
