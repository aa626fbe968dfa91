# Copyright (c) Meta Platforms, Inc. and affiliates.

"""Tests for top-k comparators."""

import unittest

from kvstream.errors import ParseError
from kvstream.topk.comparator import (
    Comparator,
    INT64_MAX,
    INT64_MIN,
    parse_float64,
    parse_int64,
    parse_utf8,
    ValueType,
)


class ParseInt64Test(unittest.TestCase):
    """Tests for parse_int64."""

    def test_valid(self):
        self.assertEqual(parse_int64(b"42"), 42)
        self.assertEqual(parse_int64(b"-7"), -7)
        self.assertEqual(parse_int64(b"+3"), 3)
        self.assertEqual(parse_int64(b"007"), 7)

    def test_bounds(self):
        self.assertEqual(parse_int64(b"9223372036854775807"), INT64_MAX)
        self.assertEqual(parse_int64(b"-9223372036854775808"), INT64_MIN)

    def test_out_of_range(self):
        with self.assertRaises(ParseError) as ctx:
            parse_int64(b"9223372036854775808")
        self.assertIn("out of range", str(ctx.exception))

    def test_invalid(self):
        for field in [b"", b"abc", b"1.5", b" 1", b"1 ", b"1_000", b"0x10", b"-"]:
            with self.subTest(field=field):
                with self.assertRaises(ParseError):
                    parse_int64(field)


class ParseFloat64Test(unittest.TestCase):
    """Tests for parse_float64."""

    def test_valid(self):
        self.assertLess(parse_float64(b"-1.5"), parse_float64(b"2"))
        self.assertLess(parse_float64(b"1e2"), parse_float64(b"1e3"))
        self.assertLess(parse_float64(b"1e308"), parse_float64(b"inf"))

    def test_nan_sorts_above_everything(self):
        self.assertGreater(parse_float64(b"nan"), parse_float64(b"inf"))
        self.assertEqual(parse_float64(b"nan"), parse_float64(b"NaN"))

    def test_negative_zero_sorts_below_zero(self):
        self.assertLess(parse_float64(b"-0.0"), parse_float64(b"0.0"))

    def test_invalid(self):
        for field in [b"", b"abc", b" 1.0", b"1.0\n", b"1_0.0", b"\xff"]:
            with self.subTest(field=field):
                with self.assertRaises(ParseError):
                    parse_float64(field)


class ParseUtf8Test(unittest.TestCase):
    """Tests for parse_utf8."""

    def test_valid(self):
        self.assertEqual(parse_utf8("héllo".encode("utf-8")), "héllo")

    def test_invalid(self):
        with self.assertRaises(ParseError):
            parse_utf8(b"\xff\xfe")


class ComparatorTest(unittest.TestCase):
    """Tests for Comparator."""

    def test_bytes_is_lexicographic(self):
        cmp = Comparator()
        self.assertGreater(cmp(b"9", b"11"), 0)
        self.assertLess(cmp(b"a", b"b"), 0)
        self.assertEqual(cmp(b"x", b"x"), 0)

    def test_int64_is_numeric(self):
        cmp = Comparator(ValueType.INT64)
        self.assertLess(cmp(b"9", b"11"), 0)
        self.assertEqual(cmp(b"+5", b"5"), 0)

    def test_float64_is_numeric(self):
        cmp = Comparator(ValueType.FLOAT64)
        self.assertLess(cmp(b"9.5", b"10"), 0)

    def test_utf8_is_codepoint_order(self):
        cmp = Comparator(ValueType.UTF8)
        self.assertLess(cmp("z".encode(), "é".encode()), 0)
        self.assertGreater(cmp("한".encode(), "é".encode()), 0)

    def test_reverse_negates(self):
        cmp = Comparator(ValueType.INT64, reverse=True)
        self.assertGreater(cmp(b"9", b"11"), 0)
        self.assertEqual(cmp(b"3", b"3"), 0)

    def test_value_type_from_string(self):
        self.assertEqual(Comparator("int64").value_type, ValueType.INT64)

    def test_parse_error_propagates(self):
        with self.assertRaises(ParseError):
            Comparator(ValueType.INT64)(b"1", b"one")


if __name__ == "__main__":
    unittest.main()
