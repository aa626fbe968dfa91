# Copyright (c) Meta Platforms, Inc. and affiliates.

"""Tests for record errors."""

import unittest

from kvstream.errors import (
    InvalidFieldIndexError,
    MalformedLineError,
    ParseError,
    RecordError,
)


class RecordErrorTest(unittest.TestCase):
    """Tests for RecordError message formatting."""

    def test_without_line_number(self):
        self.assertEqual(str(RecordError("bad input")), "bad input")

    def test_at_line_prefixes_message(self):
        error = ParseError("cannot parse b'x' into int64").at_line(3)
        self.assertEqual(error.line_number, 3)
        self.assertEqual(str(error), "line 3: cannot parse b'x' into int64")

    def test_at_line_keeps_first_line_number(self):
        error = MalformedLineError("missing", line_number=2)
        self.assertEqual(error.at_line(5).line_number, 2)

    def test_subclasses(self):
        for cls in (MalformedLineError, ParseError, InvalidFieldIndexError):
            self.assertTrue(issubclass(cls, RecordError))


if __name__ == "__main__":
    unittest.main()
