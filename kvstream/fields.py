# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Field splitting and joining on a single delimiter byte.

All functions are pure and operate on bytes. Splitting is exact: no
trimming and no collapsing of repeated delimiters.
"""

from typing import Sequence

from kvstream.errors import InvalidFieldIndexError, MalformedLineError

# Escapes accepted where a delimiter is given on the command line
DELIMITER_ESCAPES = {
    "\\t": "\t",
    "\\n": "\n",
    "\\0": "\0",
    "\\\\": "\\",
}


def parse_delimiter(value: str) -> bytes:
    """
    Convert a user-supplied delimiter into a single byte.

    Args:
        value: One ASCII character, or one of the escapes in DELIMITER_ESCAPES

    Returns:
        The delimiter as a one-byte bytes object

    Raises:
        ValueError: If the value does not denote exactly one byte

    Examples:
        >>> parse_delimiter(",")
        b','
        >>> parse_delimiter("\\\\t")
        b'\\t'
    """
    value = DELIMITER_ESCAPES.get(value, value)
    if len(value) != 1 or not value.isascii():
        raise ValueError(
            f"Invalid delimiter: {value!r}. Expected a single ASCII character"
        )
    return value.encode("ascii")


def check_delimiter(delimiter: bytes, name: str = "delimiter") -> None:
    """Raise ValueError unless delimiter is exactly one byte."""
    if not isinstance(delimiter, bytes) or len(delimiter) != 1:
        raise ValueError(f"{name} must be a single byte, got {delimiter!r}")


def split_fields(line: bytes, delimiter: bytes) -> list[bytes]:
    """Split a line into all of its fields."""
    return line.split(delimiter)


def split_key_value(line: bytes, delimiter: bytes) -> tuple[bytes, bytes]:
    """
    Split a line into its first field and the remainder.

    The remainder keeps any further delimiters verbatim.

    Raises:
        MalformedLineError: If the line contains no delimiter
    """
    key, sep, value = line.partition(delimiter)
    if not sep:
        raise MalformedLineError(
            f"expected key and value separated by {delimiter!r}, got {line!r}"
        )
    return key, value


def field_at(line: bytes, delimiter: bytes, index: int) -> bytes:
    """
    Return the field at a 0-based index.

    Only splits as far as needed to reach the field.

    Raises:
        InvalidFieldIndexError: If the line has no field at that index
    """
    if index < 0:
        raise InvalidFieldIndexError(f"field {index + 1} does not exist")
    fields = line.split(delimiter, index + 1)
    if index >= len(fields):
        raise InvalidFieldIndexError(
            f"field {index + 1} does not exist; line has {len(fields)} field(s)"
        )
    return fields[index]


def join_fields(fields: Sequence[bytes], delimiter: bytes) -> bytes:
    """Join fields back into a line."""
    return delimiter.join(fields)
