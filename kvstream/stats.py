# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Run counters reported by the --stats option.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from tabulate import tabulate


@dataclass
class RunStats:
    """
    Counters collected while a command streams its input.

    Besides the line counts every command shares, each command registers its
    own counters (e.g. "groups emitted" or "records kept"); they are printed
    after the line counts in registration order.
    """

    lines_read: int = 0
    lines_written: int = 0
    counters: dict[str, int] = field(default_factory=dict)

    def count_lines(self, lines: Iterable[bytes]) -> Iterator[bytes]:
        """Pass lines through unchanged while counting them."""
        for line in lines:
            self.lines_read += 1
            yield line

    def bump(self, name: str, amount: int = 1) -> None:
        """Add amount to a named counter, creating it at zero."""
        self.counters[name] = self.counters.get(name, 0) + amount

    def format_table(self) -> str:
        """Format the counters as a plain two-column table."""
        rows = [
            ["lines read", self.lines_read],
            ["lines written", self.lines_written],
        ]
        rows.extend([name, value] for name, value in self.counters.items())
        return tabulate(rows, tablefmt="plain")
