# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Comparators for top-k selection.

A Comparator interprets a raw field as one of the ValueType values and
orders the results, ascending or reversed. Fields are parsed once into
sort keys; ordering is done on the keys.
"""

import math
import re
from enum import Enum
from typing import Any, Callable

from kvstream.errors import ParseError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Signed decimal integer, nothing else (no whitespace, no underscores)
_INT_PATTERN = re.compile(rb"[+-]?[0-9]+")


class ValueType(Enum):
    """How a field is interpreted for comparison."""

    BYTES = "bytes"
    UTF8 = "utf8"
    INT64 = "int64"
    FLOAT64 = "float64"


def parse_bytes(field: bytes) -> bytes:
    return field


def parse_utf8(field: bytes) -> str:
    # str comparison is codepoint-lexicographic
    try:
        return field.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"cannot decode {field!r} as UTF-8: {e.reason}")


def parse_int64(field: bytes) -> int:
    if not _INT_PATTERN.fullmatch(field):
        raise ParseError(f"cannot parse {field!r} into int64")
    value = int(field)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ParseError(f"{field!r} is out of range for int64")
    return value


def parse_float64(field: bytes) -> tuple:
    """
    Parse a field into a totally ordered float key.

    NaN equals NaN and sorts above every number; -0.0 sorts below 0.0.
    """
    if not field or field.strip() != field or b"_" in field:
        raise ParseError(f"cannot parse {field!r} into float64")
    try:
        value = float(field.decode("ascii"))
    except ValueError:
        raise ParseError(f"cannot parse {field!r} into float64")
    if math.isnan(value):
        return (1, 0.0, 0.0)
    return (0, value, math.copysign(1.0, value))


PARSERS: dict[ValueType, Callable[[bytes], Any]] = {
    ValueType.BYTES: parse_bytes,
    ValueType.UTF8: parse_utf8,
    ValueType.INT64: parse_int64,
    ValueType.FLOAT64: parse_float64,
}


class Comparator:
    """
    Ordering over raw fields under a value interpretation and direction.

    Calling the comparator on two fields returns a negative number, zero or
    a positive number, like a classic cmp function. With reverse=True the
    result is negated, so the "largest" field is the smallest value.

    Example:
        >>> cmp = Comparator(ValueType.INT64)
        >>> cmp(b"9", b"11") < 0
        True
        >>> Comparator(ValueType.BYTES)(b"9", b"11") > 0
        True
    """

    __slots__ = ("value_type", "reverse", "_parse")

    def __init__(
        self, value_type: ValueType = ValueType.BYTES, reverse: bool = False
    ) -> None:
        self.value_type = ValueType(value_type)
        self.reverse = reverse
        self._parse = PARSERS[self.value_type]

    def parse(self, field: bytes) -> Any:
        """
        Convert a raw field into a sort key.

        Raises:
            ParseError: If the field is not a valid value of the configured type
        """
        return self._parse(field)

    def compare_keys(self, a: Any, b: Any) -> int:
        """Compare two keys returned by parse(), honoring reverse."""
        result = (a > b) - (a < b)
        return -result if self.reverse else result

    def __call__(self, a: bytes, b: bytes) -> int:
        return self.compare_keys(self.parse(a), self.parse(b))

    def __repr__(self) -> str:
        return f"Comparator({self.value_type}, reverse={self.reverse})"
