# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Count occurrences of each distinct line.

The input does not need to be sorted. Memory complexity is O(distinct lines).
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from kvstream.fields import check_delimiter, join_fields
from kvstream.stats import RunStats


@dataclass
class CountOptions:
    """Configuration for the count command."""

    delimiter: bytes = b"\t"
    suppress_empty: bool = False

    def __post_init__(self) -> None:
        check_delimiter(self.delimiter)


def count_lines(lines: Iterable[bytes], suppress_empty: bool = False) -> Counter:
    """
    Count each distinct line.

    Args:
        lines: Input lines without terminators
        suppress_empty: Skip empty lines instead of counting them

    Returns:
        Counter keyed by line, in first-appearance order
    """
    counts: Counter = Counter()
    for line in lines:
        if suppress_empty and not line:
            continue
        counts[line] += 1
    return counts


def run_count(
    lines: Iterable[bytes],
    options: CountOptions,
    stats: Optional[RunStats] = None,
) -> Iterator[bytes]:
    """Yield "COUNT<delimiter>LINE" for each distinct line."""
    counts = count_lines(lines, options.suppress_empty)
    if stats is not None:
        stats.bump("distinct lines", len(counts))
    for line, count in counts.items():
        yield join_fields((str(count).encode("ascii"), line), options.delimiter)
