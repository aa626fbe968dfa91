# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Errors raised while processing input records.

Every error is fatal to a run. Engines raise them, and the CLI layer turns
them into a non-zero exit status.
"""

from typing import Optional


class RecordError(Exception):
    """Base class for errors caused by a specific input line."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def at_line(self, line_number: int) -> "RecordError":
        """Attach the 1-based input line number, keeping one already set."""
        if self.line_number is None:
            self.line_number = line_number
        return self

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


class MalformedLineError(RecordError):
    """A line has fewer fields than the operation requires."""

    pass


class ParseError(RecordError):
    """A field cannot be interpreted as the configured value type."""

    pass


class InvalidFieldIndexError(RecordError):
    """The compare field index is 0 or beyond the line's field count."""

    pass
